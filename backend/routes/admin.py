"""
Admin endpoints — login and order management.

Everything except /admin/login requires Authorization: Bearer <jwt>.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from deps import Pagination, current_admin, pagination_params
from domain.errors import UnauthorizedError, ValidationError
from domain.responses import StandardErrorResponse, paginated_response, success_response
from middleware.auth import issue_access_token
from middleware.rate_limit import api_limits, rate_limit
from models import AdminInfo, LoginRequest, LoginResponse, OrderSnapshot, StatusUpdateRequest
from services import admin_service, async_executor, notification_service, order_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])

_ERRORS = {
    401: {"model": StandardErrorResponse},
    403: {"model": StandardErrorResponse},
    404: {"model": StandardErrorResponse},
}


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit("api", api_limits)),
):
    if not request.username or not request.password:
        raise ValidationError(
            "Username and password required",
            fields=[f for f in ("username", "password") if not getattr(request, f)],
        )

    admin = await admin_service.authenticate(db, request.username, request.password)
    if not admin:
        raise UnauthorizedError("Invalid credentials")

    token = issue_access_token(username=admin.username, admin_id=admin.id)
    logger.info(f"Admin '{admin.username}' logged in")
    return LoginResponse(
        token=token,
        expiresInSeconds=settings.jwt_access_ttl_minutes * 60,
        admin=AdminInfo(username=admin.username),
    )


@router.get("/verify", responses=_ERRORS)
async def verify(username: str = Depends(current_admin)):
    """Let the dashboard check that a stored token is still good."""
    return success_response(admin={"username": username})


@router.get("/orders", responses=_ERRORS)
async def list_orders(
    status: Optional[str] = Query(None, description="pending | done | all"),
    search: Optional[str] = Query(None, description="Matches name, student ID, email or batch"),
    pagination: Pagination = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(current_admin),
):
    orders, total = await order_service.list_orders(
        db,
        status=status,
        search=search,
        page=pagination["page"],
        limit=pagination["limit"],
    )
    return paginated_response(
        "orders",
        [OrderSnapshot.model_validate(o).to_api() for o in orders],
        page=pagination["page"],
        limit=pagination["limit"],
        total=total,
    )


@router.get("/stats", responses=_ERRORS)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(current_admin),
):
    stats = await order_service.aggregate_stats(db)
    stats["totalRevenue"] = float(stats["totalRevenue"])
    return success_response(stats=stats)


@router.get("/orders/{order_id}", responses=_ERRORS)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(current_admin),
):
    order = await order_service.get_order(db, order_id)
    return success_response(order=OrderSnapshot.model_validate(order).to_api())


@router.patch("/orders/{order_id}/status", responses={**_ERRORS, 400: {"model": StandardErrorResponse}})
async def update_status(
    order_id: int,
    request: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(current_admin),
):
    order, previous_status = await order_service.update_order_status(db, order_id, request.status)
    await db.commit()

    snapshot = OrderSnapshot.model_validate(order)
    if previous_status != snapshot.status:
        logger.info(f"Admin '{admin}' moved {snapshot.order_code} {previous_status} -> {snapshot.status}")

    # The notifier itself ignores anything but pending→done
    async_executor.submit(
        notification_service.notify_status_changed, snapshot, previous_status, snapshot.status
    )

    return success_response(
        message="Order status updated successfully",
        previousStatus=previous_status,
        newStatus=snapshot.status,
        order=snapshot.to_api(),
    )


@router.delete("/orders/{order_id}", responses=_ERRORS)
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    admin: str = Depends(current_admin),
):
    snapshot = await order_service.delete_order(db, order_id)
    await db.commit()
    logger.info(f"Admin '{admin}' deleted {snapshot.order_code}")
    return success_response(message="Order deleted successfully", order=snapshot.to_api())
