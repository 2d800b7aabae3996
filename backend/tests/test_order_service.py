"""
Unit tests for the order service.

Tests admission, lookup, listing/filtering, status transitions, deletion
and aggregate stats against an in-memory database.
"""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from tests.conftest import make_draft
from db_models import Order
from domain.errors import ConflictError, NotFoundError, ValidationError
from services import order_service


@pytest.mark.asyncio
async def test_create_order_is_pending(db_session):
    """A new order starts pending and is readable back."""
    order = await order_service.create_order(db_session, make_draft())
    await db_session.commit()

    fetched = await order_service.get_order(db_session, order.id)
    assert fetched.status == "pending"
    assert fetched.jersey_number == 7
    assert fetched.created_at == fetched.updated_at


@pytest.mark.asyncio
async def test_duplicate_jersey_number_conflicts(db_session):
    """The UNIQUE constraint is translated into ConflictError naming the holder."""
    await order_service.create_order(db_session, make_draft(name="Alice", jersey_number=7))
    await db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await order_service.create_order(
            db_session, make_draft(name="Bob", jersey_number=7, email="bob@example.com")
        )
    assert exc_info.value.status_code == 409
    assert "7" in exc_info.value.message
    assert "Alice" in exc_info.value.message
    assert exc_info.value.details == {"jerseyNumber": 7, "holder": "Alice"}

    count = await db_session.execute(select(func.count(Order.id)))
    assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_get_unknown_order_raises(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        await order_service.get_order(db_session, 999)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_list_newest_first(db_session):
    first = await order_service.create_order(db_session, make_draft(jersey_number=1))
    second = await order_service.create_order(db_session, make_draft(jersey_number=2, name="Bob"))
    await db_session.commit()

    orders, total = await order_service.list_orders(db_session)
    assert total == 2
    assert [o.id for o in orders] == [second.id, first.id]


@pytest.mark.asyncio
async def test_list_search_matches_any_text_column(db_session):
    await order_service.create_order(db_session, make_draft(jersey_number=1, name="Alice", batch="2021"))
    await order_service.create_order(
        db_session,
        make_draft(jersey_number=2, name="Bob", student_id="ICE-99", email="bob@uni.edu", batch="2022"),
    )
    await db_session.commit()

    by_name, _ = await order_service.list_orders(db_session, search="aLiCe")
    assert [o.name for o in by_name] == ["Alice"]

    by_student, _ = await order_service.list_orders(db_session, search="ice-99")
    assert [o.name for o in by_student] == ["Bob"]

    by_email, _ = await order_service.list_orders(db_session, search="UNI.EDU")
    assert [o.name for o in by_email] == ["Bob"]

    by_batch, total = await order_service.list_orders(db_session, search="2021")
    assert total == 1 and by_batch[0].name == "Alice"


@pytest.mark.asyncio
async def test_list_search_treats_wildcards_literally(db_session):
    await order_service.create_order(db_session, make_draft(jersey_number=1, name="Alice"))
    await db_session.commit()

    orders, total = await order_service.list_orders(db_session, search="%")
    assert orders == [] and total == 0


@pytest.mark.asyncio
async def test_list_status_filter_and_wildcard(db_session):
    a = await order_service.create_order(db_session, make_draft(jersey_number=1))
    await order_service.create_order(db_session, make_draft(jersey_number=2, name="Bob"))
    await order_service.update_order_status(db_session, a.id, "done")
    await db_session.commit()

    done, total_done = await order_service.list_orders(db_session, status="done")
    assert total_done == 1 and done[0].id == a.id

    everything, total_all = await order_service.list_orders(db_session, status="all")
    assert total_all == 2 and len(everything) == 2


@pytest.mark.asyncio
async def test_list_pagination_is_one_indexed(db_session):
    for n in range(1, 6):
        await order_service.create_order(db_session, make_draft(jersey_number=n, name=f"P{n}"))
    await db_session.commit()

    page1, total = await order_service.list_orders(db_session, page=1, limit=2)
    page3, _ = await order_service.list_orders(db_session, page=3, limit=2)
    assert total == 5
    assert [o.jersey_number for o in page1] == [5, 4]
    assert [o.jersey_number for o in page3] == [1]


@pytest.mark.asyncio
async def test_update_status_returns_previous(db_session):
    order = await order_service.create_order(db_session, make_draft())
    await db_session.commit()

    updated, previous = await order_service.update_order_status(db_session, order.id, "done")
    assert previous == "pending"
    assert updated.status == "done"
    assert updated.updated_at >= updated.created_at

    again, previous_again = await order_service.update_order_status(db_session, order.id, "done")
    assert previous_again == "done"
    assert again.status == "done"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_status", ["cancelled", "DONE", "", None])
async def test_update_status_rejects_unknown_values(db_session, bad_status):
    order = await order_service.create_order(db_session, make_draft())
    await db_session.commit()

    with pytest.raises(ValidationError) as exc_info:
        await order_service.update_order_status(db_session, order.id, bad_status)
    assert exc_info.value.status_code == 400
    assert exc_info.value.fields == ["status"]


@pytest.mark.asyncio
async def test_update_status_unknown_order(db_session):
    with pytest.raises(NotFoundError):
        await order_service.update_order_status(db_session, 12345, "done")


@pytest.mark.asyncio
async def test_done_order_cannot_return_to_pending(db_session):
    order = await order_service.create_order(db_session, make_draft())
    await order_service.update_order_status(db_session, order.id, "done")
    await db_session.commit()

    with pytest.raises(ConflictError):
        await order_service.update_order_status(db_session, order.id, "pending")


@pytest.mark.asyncio
async def test_delete_returns_snapshot_and_removes(db_session):
    order = await order_service.create_order(db_session, make_draft())
    await db_session.commit()
    order_id = order.id

    snapshot = await order_service.delete_order(db_session, order_id)
    await db_session.commit()

    assert snapshot.id == order_id
    assert snapshot.name == "Alice"
    with pytest.raises(NotFoundError):
        await order_service.get_order(db_session, order_id)


@pytest.mark.asyncio
async def test_delete_frees_jersey_number(db_session):
    order = await order_service.create_order(db_session, make_draft(jersey_number=10))
    await db_session.commit()
    await order_service.delete_order(db_session, order.id)
    await db_session.commit()

    again = await order_service.create_order(db_session, make_draft(jersey_number=10, name="Carol"))
    await db_session.commit()
    assert again.jersey_number == 10


@pytest.mark.asyncio
async def test_aggregate_stats_empty(db_session):
    stats = await order_service.aggregate_stats(db_session)
    assert stats == {
        "totalOrders": 0,
        "ordersByStatus": {"pending": 0, "done": 0},
        "totalRevenue": Decimal("0"),
    }


@pytest.mark.asyncio
async def test_aggregate_stats_counts_only_done_revenue(db_session):
    a = await order_service.create_order(db_session, make_draft(jersey_number=1, final_price=Decimal("500.00")))
    b = await order_service.create_order(db_session, make_draft(jersey_number=2, final_price=Decimal("650.50")))
    await order_service.create_order(db_session, make_draft(jersey_number=3, final_price=Decimal("999.00")))
    await order_service.update_order_status(db_session, a.id, "done")
    await order_service.update_order_status(db_session, b.id, "done")
    await db_session.commit()

    stats = await order_service.aggregate_stats(db_session)
    assert stats["totalOrders"] == 3
    assert stats["ordersByStatus"] == {"pending": 1, "done": 2}
    assert stats["totalRevenue"] == Decimal("1150.50")
