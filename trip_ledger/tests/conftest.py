"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from trip_ledger.app.main import app
from trip_ledger.app.db.session import get_db, Base, engine_options
from trip_ledger.app.core.jwt import create_access_token

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=StaticPool,
    **engine_options(TEST_DATABASE_URL),
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Point the app at the in-memory database for the whole session."""
    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def auth_headers():
    token = create_access_token(data={"sub": "ops_desk", "user_id": 7})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def fixed_draft():
    """Builder for a valid Fixed trip body; keyword overrides replace fields."""
    def build(**overrides):
        draft = {
            "trip_type": "Fixed",
            "transaction_date": "2026-10-01",
            "customer_id": 1,
            "project_id": 3,
            "opening_km": 1000,
            "closing_km": 1080,
            "vehicle_ids": [5, 6],
            "driver_ids": [9],
            "fixed_freight": "800.00",
            "toll_expenses": "100.00",
        }
        draft.update(overrides)
        return draft
    return build


@pytest.fixture
def adhoc_draft():
    """Builder for a valid Adhoc trip body; keyword overrides replace fields."""
    def build(**overrides):
        draft = {
            "trip_type": "Adhoc",
            "transaction_date": "2026-10-02",
            "customer_id": 1,
            "opening_km": 100,
            "closing_km": 150,
            "trip_no": "TRIP-0042",
            "vehicle_number": "KA01AB1234",
            "vendor_name": "Sharma Transports",
            "vendor_number": "9876543210",
            "driver_name": "Ravi Kumar",
            "driver_number": "9123456780",
            "fixed_freight": "1000.00",
            "per_km_variable_rate": "10.00",
            "toll_expenses": "50.00",
            "advance_paid_amount": "500.00",
            "advance_paid_mode": "UPI",
            "balance_paid_amount": "1000.00",
        }
        draft.update(overrides)
        return draft
    return build
