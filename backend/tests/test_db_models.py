"""
Tests for ORM database models.

Tests: Order/AdminUser creation, column defaults, unique constraints.
"""
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from db_models import AdminUser, Order


def _order(**overrides) -> Order:
    fields = dict(
        name="Alice",
        student_id="ICE-2021-001",
        jersey_number=7,
        size="M",
        collar_type="Polo",
        sleeve_type="Half",
        email="alice@example.com",
        final_price=Decimal("550.00"),
    )
    fields.update(overrides)
    return Order(**fields)


class TestOrderModel:
    """Tests for the Order ORM model."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_order_defaults(self, db_session):
        db_session.add(_order())
        await db_session.commit()

        result = await db_session.execute(select(Order).where(Order.jersey_number == 7))
        fetched = result.scalar_one()
        assert fetched.status == "pending"
        assert fetched.created_at is not None
        assert fetched.updated_at is not None
        assert fetched.batch is None
        assert fetched.transaction_id is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_price_keeps_two_decimals(self, db_session):
        db_session.add(_order(final_price=Decimal("612.50")))
        await db_session.commit()

        result = await db_session.execute(select(Order.final_price))
        assert result.scalar_one() == Decimal("612.50")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_duplicate_jersey_number_rejected(self, db_session):
        db_session.add(_order())
        await db_session.commit()

        db_session.add(_order(name="Bob", email="bob@example.com"))
        with pytest.raises(IntegrityError) as exc_info:
            await db_session.commit()
        assert "jersey_number" in str(exc_info.value.orig)
        await db_session.rollback()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_same_name_different_numbers_allowed(self, db_session):
        db_session.add(_order(jersey_number=1))
        db_session.add(_order(jersey_number=2))
        await db_session.commit()

        result = await db_session.execute(select(Order).where(Order.name == "Alice"))
        assert len(result.scalars().all()) == 2


class TestAdminUserModel:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, db_session):
        db_session.add(AdminUser(username="ice_dep", password_hash="x"))
        await db_session.commit()

        db_session.add(AdminUser(username="ice_dep", password_hash="y"))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()
