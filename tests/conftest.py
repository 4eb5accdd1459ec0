"""
SubTrack Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (real in-memory SQLite, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── engine:        Async in-memory SQLite engine with the schema created
    ├── storage:       SqliteStorage on that engine
    ├── service:       SubscriptionService on that storage
    ├── test_client:   HTTPX AsyncClient wired to an app using that storage
    ├── user_id:       A random user UUID
    └── make_spec:     Factory for SubscriptionSpec test data
"""

import os
import tempfile
from typing import AsyncGenerator, Optional
from uuid import UUID, uuid4

# Override settings for testing BEFORE any subtrack imports
# Why: Prevents tests from touching a real database or reading a deployment config
os.environ["ENV"] = "dev"
os.environ["STORAGE_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="subtrack_test_"), "subscriptions.db"
)
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ.pop("CONFIG_PATH", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from subtrack.database import Base
from subtrack.domain import Period, SubscriptionSpec
from subtrack.models.subscription import SubscriptionRecord  # noqa: F401
from subtrack.services.subscription_service import SubscriptionService
from subtrack.storage.sqlite import SqliteStorage


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Async engine on a private in-memory SQLite database.

    StaticPool keeps the single connection alive, otherwise every new
    session would see a fresh, empty database.
    """
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def storage(engine) -> SqliteStorage:
    return SqliteStorage(engine, operation_timeout=5.0)


@pytest.fixture
def service(storage) -> SubscriptionService:
    return SubscriptionService(storage)


@pytest_asyncio.fixture
async def test_client(storage):
    """
    Provides an async HTTP test client for endpoint testing.

    How:   ASGITransport routes requests straight into the app. The lifespan
           does not run, so the storage is attached to app.state here.
    """
    from subtrack.main import create_app

    app = create_app()
    app.state.storage = storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Test Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_spec(user_id):
    """
    Factory for SubscriptionSpec instances.

    Usage:
        spec = make_spec(service_name="Netflix", start=Period(1, 2024), end=Period(3, 2024))
    """

    def _make(
        service_name: str = "Yandex Plus",
        price: int = 400,
        user: Optional[UUID] = None,
        start: Period = Period(month=7, year=2025),
        end: Optional[Period] = None,
    ) -> SubscriptionSpec:
        return SubscriptionSpec(
            service_name=service_name,
            price=price,
            user_id=user or user_id,
            start=start,
            end=end or start.add_months(0, 1),
        )

    return _make
