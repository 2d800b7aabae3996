"""
Order service — persistence of jersey orders.

Owns every read and write of the `orders` table. Functions flush but do not
commit; the route that owns the request decides when to commit.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Order
from domain.constants import STATUS_FILTER_WILDCARD
from domain.enums import OrderStatus
from domain.errors import ConflictError, NotFoundError, ValidationError
from models import OrderSnapshot
from services import uniqueness_service
from utils.validators import OrderDraft

logger = logging.getLogger(__name__)


async def create_order(db: AsyncSession, draft: OrderDraft) -> Order:
    """
    Persist a new pending order.

    Raises:
        ConflictError(409) if the jersey number was taken concurrently
        (the UNIQUE constraint fired after the pre-check passed).
    """
    now = datetime.utcnow()
    order = Order(
        name=draft.name,
        student_id=draft.student_id,
        jersey_number=draft.jersey_number,
        batch=draft.batch,
        size=draft.size,
        collar_type=draft.collar_type,
        sleeve_type=draft.sleeve_type,
        email=draft.email,
        transaction_id=draft.transaction_id,
        notes=draft.notes,
        final_price=draft.final_price,
        status=OrderStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    db.add(order)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if "jersey_number" not in str(e.orig):
            raise
        # Race: another submission claimed the number between check and insert
        holder = await uniqueness_service.find_jersey_holder(db, draft.jersey_number)
        logger.warning(f"Jersey #{draft.jersey_number} lost insert race (holder={holder})")
        raise uniqueness_service.jersey_conflict(draft.jersey_number, holder)
    return order


async def get_order(db: AsyncSession, order_id: int) -> Order:
    res = await db.execute(select(Order).where(Order.id == order_id))
    order = res.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", str(order_id))
    return order


def _filter_conditions(status: str | None, search: str | None) -> list:
    conditions = []
    if status and status != STATUS_FILTER_WILDCARD:
        conditions.append(Order.status == status)
    if search and search.strip():
        needle = search.strip()
        conditions.append(
            or_(
                Order.name.icontains(needle, autoescape=True),
                Order.student_id.icontains(needle, autoescape=True),
                Order.email.icontains(needle, autoescape=True),
                Order.batch.icontains(needle, autoescape=True),
            )
        )
    return conditions


async def list_orders(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Order], int]:
    """
    Newest-first page of orders plus the total number of matches.

    `search` is a case-insensitive substring match on name, student ID,
    email or batch. `status` of None or "all" disables the status filter.
    Pages are 1-indexed.
    """
    conditions = _filter_conditions(status, search)
    offset = (max(page, 1) - 1) * limit

    res = await db.execute(
        select(Order)
        .where(*conditions)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    orders = list(res.scalars().all())

    count_res = await db.execute(select(func.count(Order.id)).where(*conditions))
    total = count_res.scalar_one()
    return orders, total


async def update_order_status(
    db: AsyncSession,
    order_id: int,
    new_status: str,
) -> tuple[Order, str]:
    """
    Set an order's status.

    Returns:
        (order, previous_status) so callers can tell a real transition from a no-op.

    Raises:
        ValidationError(400) for statuses other than pending/done
        NotFoundError(404) for unknown ids
        ConflictError(409) when moving a done order back to pending
    """
    if new_status not in OrderStatus.values():
        raise ValidationError(
            "Invalid status. Only pending/done allowed.", fields=["status"]
        )

    order = await get_order(db, order_id)
    previous_status = order.status

    if previous_status == OrderStatus.DONE.value and new_status == OrderStatus.PENDING.value:
        raise ConflictError(
            f"Order {order_id} is already done and cannot return to pending",
            details={"currentStatus": previous_status},
        )

    order.status = new_status
    order.updated_at = datetime.utcnow()
    await db.flush()

    if previous_status != new_status:
        logger.info(f"Order {order_id} status {previous_status} -> {new_status}")
    return order, previous_status


async def delete_order(db: AsyncSession, order_id: int) -> OrderSnapshot:
    """Permanently remove an order; returns what was deleted."""
    order = await get_order(db, order_id)
    snapshot = OrderSnapshot.model_validate(order)
    await db.delete(order)
    await db.flush()
    logger.info(f"Order {order_id} deleted (jersey #{snapshot.jersey_number}, {snapshot.name})")
    return snapshot


async def aggregate_stats(db: AsyncSession) -> dict:
    """
    Order counts and revenue.

    Revenue only counts done orders; with none it is 0, never None.
    """
    total_res = await db.execute(select(func.count(Order.id)))
    total = total_res.scalar_one()

    by_status = {s.value: 0 for s in OrderStatus}
    status_res = await db.execute(
        select(Order.status, func.count(Order.id)).group_by(Order.status)
    )
    for status, count in status_res.all():
        by_status[status] = count

    revenue_res = await db.execute(
        select(func.coalesce(func.sum(Order.final_price), 0)).where(
            Order.status == OrderStatus.DONE.value
        )
    )
    revenue = revenue_res.scalar_one()

    return {
        "totalOrders": total,
        "ordersByStatus": by_status,
        "totalRevenue": Decimal(str(revenue or 0)),
    }
