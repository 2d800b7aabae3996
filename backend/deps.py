"""
Shared FastAPI dependencies.

Routers import common dependencies from here (admin guard, pagination).
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query

from middleware.auth import require_admin


class Pagination(TypedDict):
    page: int
    limit: int


def pagination_params(
    page: int = Query(1, ge=1, le=100_000, description="1-indexed page number"),
    limit: int = Query(50, ge=1, le=200, description="Orders per page"),
) -> Pagination:
    return {"page": page, "limit": limit}


async def current_admin(claims: dict = Depends(require_admin)) -> str:
    """Username of the authenticated admin."""
    return claims["sub"]
