"""
Uniqueness guard — jersey number and name checks.

The jersey pre-check only exists to produce a friendly 409 in the common
case. Two concurrent submissions can both pass it; the UNIQUE constraint on
orders.jersey_number decides, and order_service translates the resulting
IntegrityError into the same ConflictError raised here.

Name uniqueness is advisory: it backs the check-name endpoint and never
blocks admission.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Order
from domain.errors import ConflictError

logger = logging.getLogger(__name__)


async def find_jersey_holder(db: AsyncSession, jersey_number: int) -> str | None:
    """Name of the order currently holding this number, or None if free."""
    res = await db.execute(
        select(Order.name).where(Order.jersey_number == jersey_number).limit(1)
    )
    return res.scalar_one_or_none()


async def jersey_availability(db: AsyncSession, jersey_number: int) -> tuple[bool, str | None]:
    """Return (available, holder_name)."""
    holder = await find_jersey_holder(db, jersey_number)
    return holder is None, holder


def jersey_conflict(jersey_number: int, holder: str | None) -> ConflictError:
    if holder:
        message = f"Jersey #{jersey_number} is already taken by {holder}"
    else:
        message = f"Jersey #{jersey_number} is already taken"
    return ConflictError(message, details={"jerseyNumber": jersey_number, "holder": holder})


async def ensure_jersey_available(db: AsyncSession, jersey_number: int) -> None:
    """
    Raise ConflictError(409) if any order already holds this number.

    The check ignores batch: numbers are unique across the whole department.
    """
    holder = await find_jersey_holder(db, jersey_number)
    if holder is not None:
        logger.info(f"Jersey #{jersey_number} rejected: held by {holder}")
        raise jersey_conflict(jersey_number, holder)


async def name_exists(db: AsyncSession, name: str) -> bool:
    """Case-insensitive exact match against existing order names."""
    needle = name.strip().lower()
    if not needle:
        return False
    res = await db.execute(
        select(Order.id).where(func.lower(Order.name) == needle).limit(1)
    )
    return res.scalar_one_or_none() is not None
