"""
Admin service — staff accounts and credential checks.

Accounts come from configuration (ADMIN_ACCOUNTS) and are provisioned once at
startup; provisioning is idempotent and never overwrites an existing password.
"""

import logging

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import AdminUser

logger = logging.getLogger(__name__)

_BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.error("Stored admin password hash is not a valid bcrypt hash")
        return False


async def get_admin(db: AsyncSession, username: str) -> AdminUser | None:
    res = await db.execute(select(AdminUser).where(AdminUser.username == username))
    return res.scalar_one_or_none()


async def authenticate(db: AsyncSession, username: str, password: str) -> AdminUser | None:
    """Return the admin if the credentials match, else None."""
    admin = await get_admin(db, username)
    if not admin or not verify_password(password, admin.password_hash):
        logger.info(f"Failed admin login for '{username}'")
        return None
    return admin


async def provision_admins(db: AsyncSession, accounts: list[tuple[str, str]]) -> list[str]:
    """
    Create each configured account that does not exist yet.

    Returns:
        Usernames that were created on this call.
    """
    created = []
    for username, password in accounts:
        if await get_admin(db, username):
            continue
        db.add(AdminUser(username=username, password_hash=hash_password(password)))
        await db.flush()
        created.append(username)
        logger.info(f"Admin account provisioned: {username}")
    return created
