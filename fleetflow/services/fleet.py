"""
Vehicle and driver registry operations.

Covers the plain create / read / update / delete surface for fleet
resources plus the two outside collaborators that may move resource
status on their own:

* **maintenance** -- vehicles to / from IN_SHOP, or RETIRED;
* **compliance**  -- drivers to SUSPENDED / OFF_DUTY and back.

Neither collaborator may touch a resource an active trip holds: ON_TRIP
vehicles and ON_DUTY drivers have no collaborator moves at all (see
``VEHICLE_STATUS_CHANGES`` / ``DRIVER_STATUS_CHANGES``).  Descriptive
updates never write ``status`` or ``odometer``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fleetflow.domain.entities import Driver, Principal, Vehicle
from fleetflow.domain.enums import (
    DRIVER_STATUS_CHANGES,
    DriverStatus,
    VEHICLE_STATUS_CHANGES,
    VehicleStatus,
    VehicleType,
)
from fleetflow.domain.errors import (
    ConflictError,
    DuplicateError,
    InvalidStateError,
    UneditableFieldError,
)
from fleetflow.infrastructure.coordinator import TransactionalCoordinator

logger = logging.getLogger(__name__)

VEHICLE_EDITABLE_FIELDS = frozenset(
    {"name", "model", "vehicle_type", "max_capacity", "acquisition_cost", "region"}
)
DRIVER_EDITABLE_FIELDS = frozenset(
    {"name", "license_expiry", "license_category", "safety_score", "complaints"}
)
DRIVER_INITIAL_STATUSES = frozenset(
    {DriverStatus.AVAILABLE, DriverStatus.OFF_DUTY, DriverStatus.SUSPENDED}
)


def _check_fields(fields: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise UneditableFieldError(unknown)


class FleetRegistry:
    def __init__(self, coordinator: TransactionalCoordinator):
        self.coordinator = coordinator

    # ── Vehicles ──────────────────────────────────────────────────────

    async def create_vehicle(
        self,
        *,
        name: str,
        license_plate: str,
        max_capacity: float,
        model: str = "",
        vehicle_type: VehicleType = VehicleType.TRUCK,
        odometer: float = 0.0,
        acquisition_cost: float = 0.0,
        region: str = "Default",
    ) -> Vehicle:
        async with self.coordinator.unit() as uow:
            if await uow.vehicles.get_by_plate(license_plate):
                raise DuplicateError(
                    "License plate already registered",
                    {"license_plate": license_plate},
                )
            vehicle = await uow.vehicles.add(
                name=name,
                model=model,
                license_plate=license_plate,
                vehicle_type=vehicle_type,
                max_capacity=max_capacity,
                odometer=odometer,
                initial_odometer=odometer,
                acquisition_cost=acquisition_cost,
                region=region,
                status=VehicleStatus.AVAILABLE,
            )
        logger.info("Vehicle %d registered (%s)", vehicle.id, license_plate)
        return vehicle

    async def get_vehicle(self, vehicle_id: int) -> Vehicle:
        async with self.coordinator.unit() as uow:
            return await uow.vehicles.get(vehicle_id)

    async def list_vehicles(
        self,
        *,
        status: Optional[VehicleStatus] = None,
        vehicle_type: Optional[VehicleType] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Vehicle], int]:
        async with self.coordinator.unit() as uow:
            return await uow.vehicles.find(
                status=status,
                vehicle_type=vehicle_type,
                search=search,
                offset=(page - 1) * limit,
                limit=limit,
            )

    async def update_vehicle(self, vehicle_id: int, fields: dict[str, Any]) -> Vehicle:
        _check_fields(fields, VEHICLE_EDITABLE_FIELDS)
        async with self.coordinator.unit() as uow:
            if not fields:
                return await uow.vehicles.get(vehicle_id)
            return await uow.vehicles.update_fields(vehicle_id, fields)

    async def delete_vehicle(self, principal: Principal, vehicle_id: int) -> None:
        async with self.coordinator.unit() as uow:
            await uow.vehicles.get(vehicle_id, for_update=True)
            if await uow.trips.count_active_for_vehicle(vehicle_id):
                raise InvalidStateError(
                    "Cannot delete vehicle with active trips",
                    {"vehicle_id": vehicle_id},
                )
            if await uow.trips.count_for_vehicle(vehicle_id):
                raise InvalidStateError(
                    "Cannot delete vehicle with trip history; retire it instead",
                    {"vehicle_id": vehicle_id},
                )
            await uow.vehicles.delete(vehicle_id)
        logger.info("Vehicle %d deleted by %s", vehicle_id, principal.subject)

    async def change_vehicle_status(
        self, principal: Principal, vehicle_id: int, status: VehicleStatus
    ) -> Vehicle:
        """Maintenance collaborator entry point."""
        async with self.coordinator.unit() as uow:
            vehicle = await uow.vehicles.get(vehicle_id)
            if status not in VEHICLE_STATUS_CHANGES.get(vehicle.status, set()):
                raise InvalidStateError(
                    f"Vehicle cannot move from {vehicle.status.value} "
                    f"to {status.value} outside the trip lifecycle",
                    {"vehicle_id": vehicle_id, "status": vehicle.status.value},
                )
            matched = await uow.vehicles.set_status(
                vehicle_id, status, expected=vehicle.status
            )
            if not matched:
                raise ConflictError(
                    f"Vehicle {vehicle_id} changed status concurrently",
                    {"vehicle_id": vehicle_id},
                )
            updated = await uow.vehicles.get(vehicle_id)
        logger.info(
            "Vehicle %d %s -> %s by %s",
            vehicle_id, vehicle.status.value, status.value, principal.subject,
        )
        return updated

    # ── Drivers ───────────────────────────────────────────────────────

    async def create_driver(
        self,
        *,
        name: str,
        license_number: str,
        license_expiry: date,
        license_category: str = "C",
        status: DriverStatus = DriverStatus.AVAILABLE,
    ) -> Driver:
        if status not in DRIVER_INITIAL_STATUSES:
            raise InvalidStateError(
                f"A new driver cannot start as {status.value}",
                {"status": status.value},
            )
        async with self.coordinator.unit() as uow:
            if await uow.drivers.get_by_license_number(license_number):
                raise DuplicateError(
                    "License number already registered",
                    {"license_number": license_number},
                )
            driver = await uow.drivers.add(
                name=name,
                license_number=license_number,
                license_expiry=license_expiry,
                license_category=license_category,
                status=status,
            )
        logger.info("Driver %d registered (%s)", driver.id, license_number)
        return driver

    async def get_driver(self, driver_id: int) -> Driver:
        async with self.coordinator.unit() as uow:
            return await uow.drivers.get(driver_id)

    async def list_drivers(
        self,
        *,
        status: Optional[DriverStatus] = None,
        search: Optional[str] = None,
    ) -> list[Driver]:
        async with self.coordinator.unit() as uow:
            return await uow.drivers.find(status=status, search=search)

    async def update_driver(self, driver_id: int, fields: dict[str, Any]) -> Driver:
        _check_fields(fields, DRIVER_EDITABLE_FIELDS)
        async with self.coordinator.unit() as uow:
            if not fields:
                return await uow.drivers.get(driver_id)
            return await uow.drivers.update_fields(driver_id, fields)

    async def delete_driver(self, principal: Principal, driver_id: int) -> None:
        async with self.coordinator.unit() as uow:
            await uow.drivers.get(driver_id, for_update=True)
            if await uow.trips.count_active_for_driver(driver_id):
                raise InvalidStateError(
                    "Cannot delete driver with active trips",
                    {"driver_id": driver_id},
                )
            if await uow.trips.count_for_driver(driver_id):
                raise InvalidStateError(
                    "Cannot delete driver with trip history",
                    {"driver_id": driver_id},
                )
            await uow.drivers.delete(driver_id)
        logger.info("Driver %d deleted by %s", driver_id, principal.subject)

    async def change_driver_status(
        self, principal: Principal, driver_id: int, status: DriverStatus
    ) -> Driver:
        """Compliance collaborator entry point."""
        async with self.coordinator.unit() as uow:
            driver = await uow.drivers.get(driver_id)
            if status not in DRIVER_STATUS_CHANGES.get(driver.status, set()):
                raise InvalidStateError(
                    f"Driver cannot move from {driver.status.value} "
                    f"to {status.value} outside the trip lifecycle",
                    {"driver_id": driver_id, "status": driver.status.value},
                )
            matched = await uow.drivers.set_status(
                driver_id, status, expected=driver.status
            )
            if not matched:
                raise ConflictError(
                    f"Driver {driver_id} changed status concurrently",
                    {"driver_id": driver_id},
                )
            updated = await uow.drivers.get(driver_id)
        logger.info(
            "Driver %d %s -> %s by %s",
            driver_id, driver.status.value, status.value, principal.subject,
        )
        return updated
