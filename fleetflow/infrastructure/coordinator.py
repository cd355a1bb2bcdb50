"""
Transactional Coordinator
=========================

Opens one database transaction per operation and applies a
``TransitionPlan`` inside it.  Reads, guard evaluation and writes all
happen under the same transaction boundary; commit happens on clean exit
of ``unit()``, rollback on any exception.

Concurrency safety
------------------
* Every status write is a compare-and-swap on the status the plan was
  computed from.  If a concurrent transition got there first the update
  matches no row and the whole unit is rolled back.
* A lost dispatch CAS surfaces as the eligibility reason the plan names
  (``VEHICLE_UNAVAILABLE`` / ``DRIVER_UNAVAILABLE``); any other lost CAS
  is a ``ConflictError`` the caller may retry from a fresh read.
* The partial unique indexes on DISPATCHED trips back this up at commit
  time; an ``IntegrityError`` is reported as ``ConflictError``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repositories import DriverRepository, TripRepository, VehicleRepository
from fleetflow.domain.entities import Trip
from fleetflow.domain.errors import ConflictError, EligibilityError
from fleetflow.domain.lifecycle import DriverWrite, TransitionPlan, VehicleWrite

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories bound to one open transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.vehicles = VehicleRepository(session)
        self.drivers = DriverRepository(session)
        self.trips = TripRepository(session)

    async def apply(self, plan: TransitionPlan) -> Trip:
        """Apply every write in *plan* or raise; returns the updated trip."""
        if plan.vehicle is not None:
            await self._apply_vehicle(plan.vehicle)
        if plan.driver is not None:
            await self._apply_driver(plan.driver)

        write = plan.trip
        extra = {}
        if write.completed_at is not None:
            extra["completed_at"] = write.completed_at
        if write.distance is not None:
            extra["distance"] = write.distance
        if write.actual_fuel_cost is not None:
            extra["actual_fuel_cost"] = write.actual_fuel_cost

        matched = await self.trips.set_status(
            write.trip_id, write.status, expected=write.expected_status, **extra
        )
        if not matched:
            raise ConflictError(
                f"Trip {write.trip_id} is no longer {write.expected_status.value}",
                {"trip_id": write.trip_id},
            )
        return await self.trips.get(write.trip_id)

    async def _apply_vehicle(self, write: VehicleWrite) -> None:
        matched = await self.vehicles.set_status(
            write.vehicle_id,
            write.status,
            expected=write.expected_status,
            odometer=write.odometer,
        )
        if matched:
            return
        current = await self.vehicles.get(write.vehicle_id)
        if write.conflict_reason is not None:
            raise EligibilityError(
                write.conflict_reason,
                f"Vehicle is {current.status.value}, cannot dispatch.",
                {"vehicle_id": write.vehicle_id, "status": current.status.value},
            )
        raise ConflictError(
            f"Vehicle {write.vehicle_id} is {current.status.value}, "
            f"expected {write.expected_status.value}",
            {"vehicle_id": write.vehicle_id, "status": current.status.value},
        )

    async def _apply_driver(self, write: DriverWrite) -> None:
        matched = await self.drivers.set_status(
            write.driver_id, write.status, expected=write.expected_status
        )
        if matched:
            return
        current = await self.drivers.get(write.driver_id)
        if write.conflict_reason is not None:
            raise EligibilityError(
                write.conflict_reason,
                f"Driver is {current.status.value}, cannot dispatch.",
                {"driver_id": write.driver_id, "status": current.status.value},
            )
        raise ConflictError(
            f"Driver {write.driver_id} is {current.status.value}, "
            f"expected {write.expected_status.value}",
            {"driver_id": write.driver_id, "status": current.status.value},
        )


class TransactionalCoordinator(Protocol):
    def unit(self) -> AsyncContextManager[UnitOfWork]: ...


class SqlAlchemyCoordinator:
    """Coordinator backed by an ``async_sessionmaker``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def unit(self) -> AsyncIterator[UnitOfWork]:
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield UnitOfWork(session)
            except IntegrityError as exc:
                logger.warning("Commit rejected by integrity constraint: %s", exc.orig)
                raise ConflictError(
                    "A concurrent change conflicted with this operation; retry it"
                ) from exc
