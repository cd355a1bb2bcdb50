"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  The production models are used as-is: the partial
unique indexes on DISPATCHED trips are created through ``sqlite_where``.
A ``StaticPool`` keeps every session on the same in-memory connection.
Foreign keys are switched on so the RESTRICT rules on ``trips`` hold
here as they do on PostgreSQL.
"""

from datetime import date, datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fleetflow.api.app import create_app
from fleetflow.api.auth import create_access_token
from fleetflow.api.dependencies import get_session_factory
from fleetflow.api.middleware import limiter
from fleetflow.domain.entities import Principal
from fleetflow.infrastructure.coordinator import SqlAlchemyCoordinator
from fleetflow.infrastructure.database import Base
from fleetflow.services.fleet import FleetRegistry
from fleetflow.services.trips import TripLifecycleManager


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Fixed "now" for service tests so licence checks are deterministic.
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
VALID_LICENSE = date(2030, 1, 1)


def fixed_clock() -> datetime:
    return NOW


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create tables on a fresh in-memory database, then drop everything."""
    test_engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores FOREIGN KEY clauses unless asked per connection.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def coordinator(session_factory) -> SqlAlchemyCoordinator:
    return SqlAlchemyCoordinator(session_factory)


@pytest.fixture
def manager(coordinator) -> TripLifecycleManager:
    return TripLifecycleManager(coordinator, clock=fixed_clock)


@pytest.fixture
def registry(coordinator) -> FleetRegistry:
    return FleetRegistry(coordinator)


@pytest.fixture
def principal() -> Principal:
    return Principal(user_id=1, subject="dispatcher@fleetflow.com", role="DISPATCHER")


@pytest.fixture
def make_vehicle(registry):
    """Factory registering a vehicle with sensible defaults."""
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"Truck {counter['n']}",
            "license_plate": f"TEST-{counter['n']:04d}",
            "max_capacity": 20000,
            "odometer": 1000,
        }
        fields.update(overrides)
        return await registry.create_vehicle(**fields)

    return _make


@pytest.fixture
def make_driver(registry):
    """Factory registering a driver with a licence valid well past ``NOW``."""
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"Driver {counter['n']}",
            "license_number": f"DL-{counter['n']:05d}",
            "license_expiry": VALID_LICENSE,
        }
        fields.update(overrides)
        return await registry.create_driver(**fields)

    return _make


@pytest.fixture
def make_trip(manager, principal):
    async def _make(vehicle, driver, **overrides):
        fields = {
            "vehicle_id": vehicle.id,
            "driver_id": driver.id,
            "origin": "Mumbai",
            "destination": "Pune",
            "cargo_weight": 1000,
            "estimated_fuel_cost": 4500,
        }
        fields.update(overrides)
        return await manager.create_trip(principal, **fields)

    return _make


# ── HTTP client ───────────────────────────────────────────────────────


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = create_access_token(
        {"sub": "dispatcher@fleetflow.com", "user_id": 1, "role": "DISPATCHER"}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
