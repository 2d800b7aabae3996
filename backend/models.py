"""
Pydantic models for request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from config import settings
from domain.constants import ORDER_CODE_WIDTH


def format_order_code(order_id: int, prefix: Optional[str] = None) -> str:
    """Public order identifier, e.g. 7 → 'ICE-007'."""
    prefix = settings.order_code_prefix if prefix is None else prefix
    return f"{prefix}-{str(order_id).zfill(ORDER_CODE_WIDTH)}"


class APIBase(BaseModel):
    """Shared base — allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Order Models ────────────────────────────────────────────────────

class OrderSnapshot(APIBase):
    """
    Immutable copy of an order row.

    Handed to the notification dispatcher and returned by admin endpoints;
    safe to use after the DB session that loaded it is closed.
    """
    model_config = ConfigDict(populate_by_name=True, from_attributes=True, frozen=True)

    id: int
    name: str
    student_id: str = Field(..., alias="studentId")
    jersey_number: int = Field(..., alias="jerseyNumber")
    batch: Optional[str] = None
    size: str
    collar_type: str = Field(..., alias="collarType")
    sleeve_type: str = Field(..., alias="sleeveType")
    email: str
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    notes: Optional[str] = None
    final_price: float = Field(..., alias="finalPrice")
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @computed_field(alias="orderCode")
    @property
    def order_code(self) -> str:
        return format_order_code(self.id)

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class OrderCreatedResponse(APIBase):
    success: bool = True
    message: str = "Order placed successfully"
    order_id: str = Field(..., alias="orderId", description="Public order code, e.g. ICE-007")
    status: str = "pending"


class JerseyCheckResponse(BaseModel):
    available: bool
    message: str


class NameCheckResponse(BaseModel):
    exists: bool
    message: str


class StatusUpdateRequest(BaseModel):
    # Plain optional string so missing or unknown values get the domain 400, not a 422
    status: Optional[str] = Field(default=None, description="New status: 'pending' or 'done'")


# ── Admin Models ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AdminInfo(BaseModel):
    username: str


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = Field("Bearer", alias="tokenType")
    expires_in_seconds: int = Field(..., alias="expiresInSeconds")
    admin: AdminInfo

    model_config = ConfigDict(populate_by_name=True)
