"""FastAPI dependency injection helpers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetflow.infrastructure.coordinator import SqlAlchemyCoordinator
from fleetflow.infrastructure.database import async_session_factory
from fleetflow.services.fleet import FleetRegistry
from fleetflow.services.trips import TripLifecycleManager


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used for every unit of work; overridden in tests."""
    return async_session_factory


def get_coordinator(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SqlAlchemyCoordinator:
    return SqlAlchemyCoordinator(session_factory)


def get_trip_manager(
    coordinator: SqlAlchemyCoordinator = Depends(get_coordinator),
) -> TripLifecycleManager:
    return TripLifecycleManager(coordinator)


def get_fleet_registry(
    coordinator: SqlAlchemyCoordinator = Depends(get_coordinator),
) -> FleetRegistry:
    return FleetRegistry(coordinator)
