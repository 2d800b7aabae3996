"""
SQLAlchemy ORM models for the Jersey Order backend.

Tables:
    orders       — one row per jersey order (jersey_number is UNIQUE)
    admin_users  — staff accounts allowed to manage orders
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, Index

from database import Base


class Order(Base):
    """A customer's jersey order and its lifecycle state."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(40), nullable=False)
    student_id = Column(String(30), nullable=False)
    # Store-level arbiter for the one-holder-per-number rule
    jersey_number = Column(Integer, unique=True, nullable=False, index=True)
    batch = Column(String(20), nullable=True)
    size = Column(String(10), nullable=False)
    collar_type = Column(String(20), nullable=False)
    sleeve_type = Column(String(20), nullable=False)
    email = Column(String(40), nullable=False)
    transaction_id = Column(String(30), nullable=True)  # free text, never verified
    notes = Column(Text, nullable=True)
    final_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # "pending" | "done"
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Admin listing: filter by status, newest first
        Index("ix_orders_status_created", "status", "created_at"),
    )


class AdminUser(Base):
    """Staff login for the admin dashboard."""
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(72), nullable=False)  # bcrypt
    created_at = Column(DateTime, default=datetime.utcnow)
