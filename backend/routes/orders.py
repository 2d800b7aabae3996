"""
Public order endpoints — submission and availability checks.

Admission flow:
    body → validate_order_submission → ensure_jersey_available
         → create_order → commit → (background) notify_order_created → 201
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from domain.errors import ValidationError
from domain.responses import StandardErrorResponse
from middleware.rate_limit import api_limits, order_limits, rate_limit
from models import (
    JerseyCheckResponse,
    NameCheckResponse,
    OrderCreatedResponse,
    OrderSnapshot,
    format_order_code,
)
from services import async_executor, notification_service, order_service, uniqueness_service
from utils.validators import parse_jersey_number, validate_order_submission

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=OrderCreatedResponse,
    responses={
        400: {"model": StandardErrorResponse},
        409: {"model": StandardErrorResponse},
        429: {"model": StandardErrorResponse},
    },
)
async def submit_order(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit("orders", order_limits)),
):
    """
    Submit a jersey order.

    finalPrice is stored as sent by the client; nothing here recomputes it.
    """
    draft = validate_order_submission(
        payload,
        jersey_min=settings.jersey_number_min,
        jersey_max=settings.jersey_number_max,
        name_max_length=settings.name_max_length,
    )

    await uniqueness_service.ensure_jersey_available(db, draft.jersey_number)
    order = await order_service.create_order(db, draft)
    await db.commit()

    snapshot = OrderSnapshot.model_validate(order)
    logger.info(
        f"Order {snapshot.order_code} admitted: jersey #{snapshot.jersey_number} for {snapshot.name}"
    )

    async_executor.submit(notification_service.notify_order_created, snapshot)

    return OrderCreatedResponse(orderId=format_order_code(snapshot.id), status=snapshot.status)


@router.get("/check-jersey", response_model=JerseyCheckResponse)
async def check_jersey(
    number: Optional[str] = Query(None, description="Jersey number to check"),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit("api", api_limits)),
):
    if number is None or not number.strip():
        raise ValidationError("Jersey number required", fields=["number"])
    jersey_number = parse_jersey_number(number)
    if jersey_number is None:
        raise ValidationError("Jersey number must be an integer", fields=["number"])
    if not settings.jersey_number_min <= jersey_number <= settings.jersey_number_max:
        raise ValidationError(
            f"Jersey number must be {settings.jersey_number_min}-{settings.jersey_number_max}",
            fields=["number"],
        )

    available, holder = await uniqueness_service.jersey_availability(db, jersey_number)
    if available:
        message = f"Jersey #{jersey_number} is available"
    else:
        message = f"Jersey #{jersey_number} is taken by {holder}"
    return JerseyCheckResponse(available=available, message=message)


@router.get("/check-name", response_model=NameCheckResponse)
async def check_name(
    name: Optional[str] = Query(None, description="Name to look up (case-insensitive)"),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit("api", api_limits)),
):
    """Advisory only: an existing name never blocks a submission."""
    if name is None or not name.strip():
        raise ValidationError("Name required", fields=["name"])

    exists = await uniqueness_service.name_exists(db, name)
    display = name.strip()
    message = f'Name "{display}" already exists' if exists else f'Name "{display}" is available'
    return NameCheckResponse(exists=exists, message=message)
