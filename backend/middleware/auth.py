"""
Admin authentication helpers.

Staff log in with username/password (routes/admin.py) and receive a
short-lived HS256 JWT. Admin endpoints require:

    Authorization: Bearer <jwt>

Missing or malformed header → 401. Token present but invalid/expired → 403.
"""
import logging
from datetime import datetime, timezone, timedelta
from fastapi import Header, HTTPException
from typing import Optional

import jwt

from config import settings
from domain.errors import PermissionDeniedError, UnauthorizedError

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def _require_secret() -> str:
    if not settings.jwt_secret:
        raise HTTPException(
            status_code=500,
            detail="Server auth misconfigured (JWT secret missing).",
        )
    return settings.jwt_secret


def decode_access_token(token: str) -> dict:
    secret = _require_secret()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise PermissionDeniedError("Access token expired.")
    except jwt.InvalidTokenError:
        raise PermissionDeniedError("Invalid access token.")


def issue_access_token(*, username: str, admin_id: int) -> str:
    secret = _require_secret()
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": username,
        "aid": admin_id,
        "role": "admin",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


async def require_admin(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> dict:
    """
    Dependency for admin-only routes. Returns the verified token claims.
    """
    token = _parse_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Access token required")
    claims = decode_access_token(token)
    if claims.get("role") != "admin":
        logger.warning(f"Token for '{claims.get('sub')}' lacks admin role")
        raise PermissionDeniedError("Admin role required.")
    return claims
