"""
Fleet consistency audit.

Cross-checks the live tables against the allocation invariant: every
DISPATCHED trip holds exactly one ON_TRIP vehicle and one ON_DUTY driver,
and nothing else is ON_TRIP / ON_DUTY.  Read-only; violations are
reported, never repaired.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from fleetflow.domain.enums import DriverStatus, TripStatus, VehicleStatus
from fleetflow.infrastructure.coordinator import TransactionalCoordinator


@dataclass(frozen=True)
class Violation:
    resource: str
    resource_id: int
    problem: str


async def audit_fleet(coordinator: TransactionalCoordinator) -> list[Violation]:
    async with coordinator.unit() as uow:
        dispatched = await uow.trips.list_by_status(TripStatus.DISPATCHED)
        on_trip = await uow.vehicles.list_by_status(VehicleStatus.ON_TRIP)
        on_duty = await uow.drivers.list_by_status(DriverStatus.ON_DUTY)

    by_vehicle = Counter(t.vehicle_id for t in dispatched)
    by_driver = Counter(t.driver_id for t in dispatched)
    on_trip_ids = {v.id for v in on_trip}
    on_duty_ids = {d.id for d in on_duty}

    violations: list[Violation] = []
    for vehicle_id in sorted(on_trip_ids | set(by_vehicle)):
        count = by_vehicle.get(vehicle_id, 0)
        if vehicle_id not in on_trip_ids:
            violations.append(
                Violation("vehicle", vehicle_id, "held by a DISPATCHED trip but not ON_TRIP")
            )
        elif count != 1:
            violations.append(
                Violation("vehicle", vehicle_id, f"ON_TRIP with {count} DISPATCHED trips")
            )

    for driver_id in sorted(on_duty_ids | set(by_driver)):
        count = by_driver.get(driver_id, 0)
        if driver_id not in on_duty_ids:
            violations.append(
                Violation("driver", driver_id, "held by a DISPATCHED trip but not ON_DUTY")
            )
        elif count != 1:
            violations.append(
                Violation("driver", driver_id, f"ON_DUTY with {count} DISPATCHED trips")
            )
    return violations
