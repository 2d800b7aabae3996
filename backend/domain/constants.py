"""
Domain constants used across services/routers.
"""
from decimal import Decimal

# Admin listing: ?status=all (or no status) means "no status filter"
STATUS_FILTER_WILDCARD = "all"

# Zero-padding width of the public order code (ICE-007)
ORDER_CODE_WIDTH = 3

# Column lengths, mirrored by the validator so oversized input is a 400, not a DB error
FIELD_MAX_LENGTHS = {
    "studentId": 30,
    "batch": 20,
    "size": 10,
    "collarType": 20,
    "sleeveType": 20,
    "email": 40,
    "transactionId": 30,
}

# Email subjects
SUBJECT_ORDER_RECEIVED = "ICE Jersey Order Confirmation - Order Received"
SUBJECT_PAYMENT_CONFIRMED = "Payment Confirmed - ICE Jersey Order"

# finalPrice must fit orders.final_price, Numeric(10, 2)
PRICE_QUANTUM = Decimal("0.01")
PRICE_LIMIT = Decimal("100000000")
