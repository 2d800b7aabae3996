"""
Standard API response helpers for consistent response formatting.

- Success: { "success": true, ...payload }
- Paginated: { "success": true, "<key>": [...], "pagination": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
import math
from typing import Any
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'notfound', 'validation')")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")


def success_response(**payload: Any) -> dict[str, Any]:
    """
    Create a standardized success response.

    Returns:
        dict: { "success": true, **payload }
    """
    return {"success": True, **payload}


def error_response(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }


def paginated_response(
    key: str,
    items: list[Any],
    *,
    page: int,
    limit: int,
    total: int,
) -> dict[str, Any]:
    """
    Create a standardized page-based response.

    Args:
        key: Name of the items field (e.g. "orders")
        items: Items for this page
        page: 1-indexed page number
        limit: Page size
        total: Total number of matching items

    Returns:
        dict: { "success": true, <key>: items, "pagination": { "page", "limit", "totalPages", "total" } }
    """
    total_pages = math.ceil(total / limit) if limit else 0
    return success_response(
        **{
            key: items,
            "pagination": {
                "page": page,
                "limit": limit,
                "totalPages": total_pages,
                "total": total,
            },
        }
    )
