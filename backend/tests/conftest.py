"""
Pytest configuration and shared fixtures for the Jersey Order tests.

Provides an in-memory SQLite DB, FastAPI clients wired to it, an admin
account with a valid token, and a mocked email transport.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest-only")

import pytest
import pytest_asyncio
from decimal import Decimal
from typing import AsyncGenerator, Generator
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from config import settings
from middleware.rate_limit import reset_rate_limits
from services import async_executor
from utils.validators import OrderDraft

# ── Test Configuration ───────────────────────────────────────────────
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"

ADMIN_USERNAME = "ice_dep"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def _fresh_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture(autouse=True)
def _fixed_order_rules():
    """Pin the configurable rules so tests do not depend on the local .env."""
    original = (
        settings.jersey_number_min,
        settings.jersey_number_max,
        settings.name_max_length,
        settings.admin_email,
    )
    settings.jersey_number_min = 0
    settings.jersey_number_max = 500
    settings.name_max_length = 40
    settings.admin_email = ""
    yield
    (
        settings.jersey_number_min,
        settings.jersey_number_max,
        settings.name_max_length,
        settings.admin_email,
    ) = original


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    import db_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture(scope="function")
def test_client(db_session: AsyncSession) -> Generator[TestClient, None, None]:
    """
    FastAPI test client with in-memory database.

    Overrides get_db dependency to use test DB session.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client sharing the test's event loop.

    Background notification tasks scheduled by a request run on this loop,
    so tests can `await async_executor.drain()` and inspect what was sent.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await async_executor.drain()
    app.dependency_overrides.clear()


# ── Mock Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def mock_send_email():
    """Replace the Brevo transport; every send 'succeeds'."""
    mock = AsyncMock(return_value=True)
    with patch("services.email_service.send_email", mock):
        yield mock


# ── Test Data Fixtures ────────────────────────────────────────────────


def make_payload(**overrides) -> dict:
    """A valid POST /orders body."""
    payload = {
        "name": "Alice",
        "studentId": "ICE-2021-001",
        "jerseyNumber": 7,
        "batch": "2021",
        "size": "M",
        "collarType": "Polo",
        "sleeveType": "Half",
        "email": "alice@example.com",
        "transactionId": "TXN123",
        "notes": "",
        "finalPrice": "550.00",
    }
    payload.update(overrides)
    return payload


def make_draft(**overrides) -> OrderDraft:
    fields = {
        "name": "Alice",
        "student_id": "ICE-2021-001",
        "jersey_number": 7,
        "size": "M",
        "collar_type": "Polo",
        "sleeve_type": "Half",
        "email": "alice@example.com",
        "final_price": Decimal("550.00"),
        "batch": "2021",
        "transaction_id": None,
        "notes": None,
    }
    fields.update(overrides)
    return OrderDraft(**fields)


@pytest.fixture
def order_payload() -> dict:
    return make_payload()


@pytest_asyncio.fixture
async def sample_admin(db_session: AsyncSession):
    """Provision one admin account in the test DB."""
    from services import admin_service

    await admin_service.provision_admins(db_session, [(ADMIN_USERNAME, ADMIN_PASSWORD)])
    await db_session.commit()
    return await admin_service.get_admin(db_session, ADMIN_USERNAME)


@pytest.fixture
def admin_headers(sample_admin) -> dict:
    """Authorization header with a valid admin JWT."""
    from middleware.auth import issue_access_token

    token = issue_access_token(username=sample_admin.username, admin_id=sample_admin.id)
    return {"Authorization": f"Bearer {token}"}
