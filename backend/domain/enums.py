"""
Domain enums.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]
