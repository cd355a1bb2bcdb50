"""
Eligibility Engine
==================

Pure predicates deciding whether a vehicle / driver pairing may take a
new trip and whether a trip may move to its next lifecycle stage.

Every predicate returns ``None`` when the operation is eligible, or a
``Rejection`` naming the *first* failing rule.  Callers turn a rejection
into an exception with ``Rejection.to_error()``; the reason tag is what
the API reports back, so rules are checked in a fixed order.

No I/O, no clock: ``now`` is always passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .entities import Driver, Trip, Vehicle
from .enums import (
    DriverStatus,
    RejectionReason,
    TripStatus,
    VehicleStatus,
)
from .errors import EligibilityError, FleetError, InvalidStateError


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str

    def to_error(self) -> FleetError:
        if self.reason == RejectionReason.INVALID_STATE:
            return InvalidStateError(self.message)
        return EligibilityError(self.reason, self.message)


@dataclass(frozen=True)
class CompletionValues:
    final_odometer: float
    distance: float
    actual_fuel_cost: float


def ensure_eligible(rejection: Optional[Rejection]) -> None:
    """Raise the error for *rejection*; do nothing when eligible."""
    if rejection is not None:
        raise rejection.to_error()


# ── Creation ──────────────────────────────────────────────────────────


def can_create_trip(
    vehicle: Vehicle, driver: Driver, cargo_weight: float, now: datetime
) -> Optional[Rejection]:
    if vehicle.status != VehicleStatus.AVAILABLE:
        return Rejection(
            RejectionReason.VEHICLE_UNAVAILABLE,
            f"Vehicle is currently {vehicle.status.value}. "
            "Only AVAILABLE vehicles can be dispatched.",
        )
    if cargo_weight > vehicle.max_capacity:
        return Rejection(
            RejectionReason.CARGO_TOO_HEAVY,
            f"Cargo weight ({cargo_weight:g}kg) exceeds vehicle max capacity "
            f"({vehicle.max_capacity:g}kg).",
        )
    # Suspension is a subset of "not AVAILABLE" but gets its own reason.
    if driver.is_suspended:
        return Rejection(
            RejectionReason.DRIVER_SUSPENDED,
            "Driver is suspended and cannot be assigned to trips.",
        )
    if driver.status != DriverStatus.AVAILABLE:
        return Rejection(
            RejectionReason.DRIVER_UNAVAILABLE,
            f"Driver is currently {driver.status.value}. "
            "Only AVAILABLE drivers can be assigned.",
        )
    if driver.license_expired(now):
        return Rejection(
            RejectionReason.LICENSE_EXPIRED,
            f"Driver's license expired on {driver.license_expiry.isoformat()}.",
        )
    return None


# ── Lifecycle ─────────────────────────────────────────────────────────


def can_dispatch(
    trip: Trip, vehicle: Vehicle, driver: Driver
) -> Optional[Rejection]:
    """Re-check resources at dispatch time; they may have moved since DRAFT."""
    if trip.status != TripStatus.DRAFT:
        return Rejection(
            RejectionReason.INVALID_STATE,
            f"Only DRAFT trips can be dispatched (trip is {trip.status.value}).",
        )
    if vehicle.status != VehicleStatus.AVAILABLE:
        return Rejection(
            RejectionReason.VEHICLE_UNAVAILABLE,
            f"Vehicle is {vehicle.status.value}, cannot dispatch.",
        )
    if driver.status != DriverStatus.AVAILABLE:
        return Rejection(
            RejectionReason.DRIVER_UNAVAILABLE,
            f"Driver is {driver.status.value}, cannot dispatch.",
        )
    return None


def can_complete(
    trip: Trip, vehicle: Vehicle, final_odometer: Optional[float] = None
) -> Optional[Rejection]:
    if trip.status != TripStatus.DISPATCHED:
        return Rejection(
            RejectionReason.INVALID_STATE,
            f"Only DISPATCHED trips can be completed (trip is {trip.status.value}).",
        )
    if final_odometer is not None and final_odometer < vehicle.odometer:
        return Rejection(
            RejectionReason.ODOMETER_ROLLBACK,
            f"Final odometer ({final_odometer:g}) is below the vehicle's "
            f"current reading ({vehicle.odometer:g}).",
        )
    return None


def resolve_completion(
    trip: Trip,
    vehicle: Vehicle,
    final_odometer: Optional[float] = None,
    distance: Optional[float] = None,
    actual_fuel_cost: Optional[float] = None,
) -> CompletionValues:
    """Fill in completion values the caller left out."""
    return CompletionValues(
        final_odometer=vehicle.odometer if final_odometer is None else final_odometer,
        distance=trip.distance if distance is None else distance,
        actual_fuel_cost=(
            trip.estimated_fuel_cost if actual_fuel_cost is None else actual_fuel_cost
        ),
    )


def can_cancel(trip: Trip) -> Optional[Rejection]:
    if trip.is_terminal:
        return Rejection(
            RejectionReason.ALREADY_TERMINAL,
            f"Cannot cancel a {trip.status.value.lower()} trip.",
        )
    return None
