"""
Input validation utilities for order submissions.

Pure functions: no database or network access. Every offending field is
reported, not just the first one, so the form can highlight all of them.
"""
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from domain.constants import FIELD_MAX_LENGTHS, PRICE_LIMIT, PRICE_QUANTUM
from domain.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

REQUIRED_FIELDS = (
    "name",
    "studentId",
    "jerseyNumber",
    "size",
    "collarType",
    "sleeveType",
    "email",
    "finalPrice",
)
OPTIONAL_TEXT_FIELDS = ("batch", "transactionId", "notes")

# Declaration order, used to report violations deterministically
_FIELD_ORDER = (
    "name",
    "studentId",
    "jerseyNumber",
    "batch",
    "size",
    "collarType",
    "sleeveType",
    "email",
    "transactionId",
    "notes",
    "finalPrice",
)


@dataclass(frozen=True)
class OrderDraft:
    """A validated, normalized order submission ready for admission."""
    name: str
    student_id: str
    jersey_number: int
    size: str
    collar_type: str
    sleeve_type: str
    email: str
    final_price: Decimal
    batch: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


def is_valid_email(value: str) -> bool:
    """Syntax-only check: local@domain.tld with no whitespace or extra '@'."""
    return bool(EMAIL_PATTERN.match(value))


def parse_jersey_number(value: Any) -> Optional[int]:
    """
    Parse a jersey number from JSON input.

    Accepts ints and integer strings; rejects booleans, floats and anything
    else. Returns None when the value is not an integer.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    return None


def parse_price(value: Any) -> Optional[Decimal]:
    """
    Parse a non-negative price with at most two decimal places.

    Returns None when the value is not a number, is negative, has more than
    two decimals, or does not fit the stored column.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        value = repr(value)
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price < 0 or price >= PRICE_LIMIT:
        return None
    if price != price.quantize(PRICE_QUANTUM):
        return None
    return price


def _clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None for absent/blank. Non-strings raise TypeError."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(value)
    value = value.strip()
    return value or None


def collect_order_violations(
    raw: Mapping[str, Any],
    *,
    jersey_min: int,
    jersey_max: int,
    name_max_length: int,
) -> tuple[list[str], dict[str, Any]]:
    """
    Check a raw submission and normalize what can be normalized.

    Returns:
        (violations, cleaned) — violations lists offending field names in
        declaration order; cleaned maps field names to normalized values.
    """
    bad: set[str] = set()
    cleaned: dict[str, Any] = {}

    for field in ("name", "studentId", "size", "collarType", "sleeveType", "email"):
        try:
            text = _clean_text(raw.get(field))
        except TypeError:
            bad.add(field)
            continue
        if text is None:
            bad.add(field)
            continue
        limit = name_max_length if field == "name" else FIELD_MAX_LENGTHS[field]
        if len(text) > limit:
            bad.add(field)
            continue
        cleaned[field] = text

    if "email" in cleaned and not is_valid_email(cleaned["email"]):
        bad.add("email")

    for field in OPTIONAL_TEXT_FIELDS:
        try:
            text = _clean_text(raw.get(field))
        except TypeError:
            bad.add(field)
            continue
        limit = FIELD_MAX_LENGTHS.get(field)
        if text is not None and limit is not None and len(text) > limit:
            bad.add(field)
            continue
        cleaned[field] = text

    number = parse_jersey_number(raw.get("jerseyNumber"))
    if number is None or not (jersey_min <= number <= jersey_max):
        bad.add("jerseyNumber")
    else:
        cleaned["jerseyNumber"] = number

    price = parse_price(raw.get("finalPrice"))
    if price is None:
        bad.add("finalPrice")
    else:
        cleaned["finalPrice"] = price

    violations = [f for f in _FIELD_ORDER if f in bad]
    return violations, cleaned


def validate_order_submission(
    raw: Mapping[str, Any],
    *,
    jersey_min: int,
    jersey_max: int,
    name_max_length: int,
) -> OrderDraft:
    """
    Validate a raw order submission.

    Raises:
        ValidationError(400) naming every missing or invalid field
    """
    violations, cleaned = collect_order_violations(
        raw,
        jersey_min=jersey_min,
        jersey_max=jersey_max,
        name_max_length=name_max_length,
    )
    if violations:
        missing = [f for f in violations if f in REQUIRED_FIELDS and _is_blank(raw.get(f))]
        if missing and len(missing) == len(violations):
            message = f"Missing required fields: {', '.join(missing)}"
        else:
            message = f"Invalid or missing fields: {', '.join(violations)}"
        if "jerseyNumber" in violations:
            message += f" (jersey number must be {jersey_min}-{jersey_max})"
        raise ValidationError(message, fields=violations)

    return OrderDraft(
        name=cleaned["name"],
        student_id=cleaned["studentId"],
        jersey_number=cleaned["jerseyNumber"],
        size=cleaned["size"],
        collar_type=cleaned["collarType"],
        sleeve_type=cleaned["sleeveType"],
        email=cleaned["email"],
        final_price=cleaned["finalPrice"],
        batch=cleaned["batch"],
        transaction_id=cleaned["transactionId"],
        notes=cleaned["notes"],
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
