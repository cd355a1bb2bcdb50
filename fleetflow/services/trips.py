"""
Trip Lifecycle Manager
======================

Owns the Trip entity and its state machine.  Every public operation is
one coordinator unit:

1. load the trip and its vehicle / driver snapshots,
2. run the Eligibility Engine (via ``plan_transition`` for lifecycle moves),
3. apply the planned writes atomically.

A rejected guard raises before any write; a lost compare-and-swap rolls
the whole unit back.  Nothing here retries.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fleetflow.domain.eligibility import can_create_trip, ensure_eligible
from fleetflow.domain.entities import Principal, Trip
from fleetflow.domain.enums import TripStatus
from fleetflow.domain.errors import (
    ConflictError,
    FleetError,
    InvalidStateError,
    UneditableFieldError,
)
from fleetflow.domain.lifecycle import TripCommand, plan_transition
from fleetflow.infrastructure.coordinator import TransactionalCoordinator

logger = logging.getLogger(__name__)

PATCHABLE_TRIP_FIELDS = frozenset(
    {"origin", "destination", "cargo_weight", "estimated_fuel_cost", "revenue"}
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TripLifecycleManager:
    def __init__(
        self,
        coordinator: TransactionalCoordinator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.coordinator = coordinator
        self.clock = clock

    async def create_trip(
        self,
        principal: Principal,
        *,
        vehicle_id: int,
        driver_id: int,
        origin: str,
        destination: str,
        cargo_weight: float = 0.0,
        estimated_fuel_cost: float = 0.0,
        revenue: float = 0.0,
    ) -> Trip:
        """Insert a DRAFT trip once the pairing passes creation checks."""
        async with self.coordinator.unit() as uow:
            vehicle = await uow.vehicles.get(vehicle_id)
            driver = await uow.drivers.get(driver_id)
            try:
                ensure_eligible(
                    can_create_trip(vehicle, driver, cargo_weight, self.clock())
                )
            except FleetError as exc:
                logger.info(
                    "Trip creation rejected for vehicle=%s driver=%s: %s",
                    vehicle_id, driver_id, exc.code,
                )
                raise

            trip = await uow.trips.add(
                vehicle_id=vehicle_id,
                driver_id=driver_id,
                origin=origin,
                destination=destination,
                cargo_weight=cargo_weight,
                estimated_fuel_cost=estimated_fuel_cost,
                revenue=revenue,
            )

        logger.info(
            "Trip %d created (vehicle=%d driver=%d) by %s",
            trip.id, vehicle_id, driver_id, principal.subject,
        )
        return trip

    async def transition_trip(
        self, principal: Principal, trip_id: int, command: TripCommand
    ) -> Trip:
        """Move a trip through its lifecycle and update its resources."""
        try:
            async with self.coordinator.unit() as uow:
                trip = await uow.trips.get(trip_id, for_update=True)
                vehicle = await uow.vehicles.get(trip.vehicle_id)
                driver = await uow.drivers.get(trip.driver_id)

                plan = plan_transition(trip, vehicle, driver, command, self.clock())
                updated = await uow.apply(plan)
        except ConflictError:
            logger.warning(
                "Trip %d %s lost a concurrent update", trip_id, command.action.value
            )
            raise
        except FleetError as exc:
            logger.info(
                "Trip %d %s rejected: %s", trip_id, command.action.value, exc.code
            )
            raise

        logger.info(
            "Trip %d %s -> %s by %s",
            trip_id, command.action.value, updated.status.value, principal.subject,
        )
        return updated

    async def patch_trip(
        self, principal: Principal, trip_id: int, fields: dict[str, Any]
    ) -> Trip:
        """Plain field patch on a non-terminal trip; no resource side effects."""
        unknown = set(fields) - PATCHABLE_TRIP_FIELDS
        if unknown:
            raise UneditableFieldError(unknown)

        async with self.coordinator.unit() as uow:
            trip = await uow.trips.get(trip_id, for_update=True)
            if trip.is_terminal:
                raise InvalidStateError(
                    f"Cannot edit a {trip.status.value} trip",
                    {"trip_id": trip_id, "status": trip.status.value},
                )
            if not fields:
                return trip
            updated = await uow.trips.update_fields(trip_id, fields)

        logger.info(
            "Trip %d patched (%s) by %s",
            trip_id, ", ".join(sorted(fields)), principal.subject,
        )
        return updated

    async def get_trip(self, trip_id: int) -> Trip:
        async with self.coordinator.unit() as uow:
            return await uow.trips.get(trip_id)

    async def list_trips(
        self,
        status: Optional[TripStatus] = None,
        search: Optional[str] = None,
    ) -> list[Trip]:
        async with self.coordinator.unit() as uow:
            return await uow.trips.find(status=status, search=search)
