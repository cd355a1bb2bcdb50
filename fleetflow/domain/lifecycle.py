"""
Trip lifecycle planning.

``plan_transition`` is the pure half of every trip transition: given the
snapshots it decides, via the Eligibility Engine, whether the command is
allowed and which rows must change.  The result is a ``TransitionPlan``
that the coordinator applies as one atomic unit.

Every write names the status it expects to overwrite (compare-and-swap),
so a plan computed from a stale read cannot double-assign a vehicle or
driver: the conditional update simply matches no row.

Coordinated writes
------------------
=========================  ==========  ==========================  =========
Transition                 Trip        Vehicle                     Driver
=========================  ==========  ==========================  =========
DRAFT -> DISPATCHED        DISPATCHED  ON_TRIP                     ON_DUTY
DISPATCHED -> COMPLETED    COMPLETED   AVAILABLE + odometer        AVAILABLE
DRAFT -> CANCELLED         CANCELLED   --                          --
DISPATCHED -> CANCELLED    CANCELLED   AVAILABLE                   AVAILABLE
=========================  ==========  ==========================  =========
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional, Union

from .eligibility import (
    can_cancel,
    can_complete,
    can_dispatch,
    ensure_eligible,
    resolve_completion,
)
from .entities import Driver, Trip, Vehicle
from .enums import (
    ACTION_TARGETS,
    DriverStatus,
    RejectionReason,
    TripAction,
    TripStatus,
    VehicleStatus,
)
from .errors import InvalidStateError


# ── Commands ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DispatchTrip:
    action: ClassVar[TripAction] = TripAction.DISPATCH


@dataclass(frozen=True)
class CompleteTrip:
    action: ClassVar[TripAction] = TripAction.COMPLETE

    final_odometer: Optional[float] = None
    distance: Optional[float] = None
    actual_fuel_cost: Optional[float] = None


@dataclass(frozen=True)
class CancelTrip:
    action: ClassVar[TripAction] = TripAction.CANCEL


TripCommand = Union[DispatchTrip, CompleteTrip, CancelTrip]


# ── Planned writes ────────────────────────────────────────────────────


@dataclass(frozen=True)
class TripWrite:
    trip_id: int
    expected_status: TripStatus
    status: TripStatus
    completed_at: Optional[datetime] = None
    distance: Optional[float] = None
    actual_fuel_cost: Optional[float] = None


@dataclass(frozen=True)
class VehicleWrite:
    vehicle_id: int
    expected_status: VehicleStatus
    status: VehicleStatus
    odometer: Optional[float] = None
    # Reported instead of a generic conflict when the CAS loses.
    conflict_reason: Optional[RejectionReason] = None


@dataclass(frozen=True)
class DriverWrite:
    driver_id: int
    expected_status: DriverStatus
    status: DriverStatus
    conflict_reason: Optional[RejectionReason] = None


@dataclass(frozen=True)
class TransitionPlan:
    action: TripAction
    trip: TripWrite
    vehicle: Optional[VehicleWrite] = None
    driver: Optional[DriverWrite] = None

    @property
    def touches_resources(self) -> bool:
        return self.vehicle is not None or self.driver is not None


# ── Planner ───────────────────────────────────────────────────────────


def plan_transition(
    trip: Trip,
    vehicle: Vehicle,
    driver: Driver,
    command: TripCommand,
    now: datetime,
) -> TransitionPlan:
    """Validate *command* against the snapshots and return the writes.

    Raises ``InvalidStateError`` or ``EligibilityError`` before anything
    is written.
    """
    if trip.vehicle_id != vehicle.id or trip.driver_id != driver.id:
        raise ValueError(f"Snapshots do not belong to trip {trip.id}")

    if isinstance(command, DispatchTrip):
        ensure_eligible(can_dispatch(trip, vehicle, driver))
        plan = _plan_dispatch(trip, vehicle, driver)
    elif isinstance(command, CompleteTrip):
        ensure_eligible(can_complete(trip, vehicle, command.final_odometer))
        plan = _plan_complete(trip, vehicle, driver, command, now)
    elif isinstance(command, CancelTrip):
        ensure_eligible(can_cancel(trip))
        plan = _plan_cancel(trip, vehicle, driver)
    else:
        raise TypeError(f"Unknown trip command: {command!r}")

    target = ACTION_TARGETS[command.action]
    if not trip.can_transition_to(target):
        raise InvalidStateError(
            f"Cannot transition from {trip.status.value} to {target.value}"
        )
    return plan


def _plan_dispatch(trip: Trip, vehicle: Vehicle, driver: Driver) -> TransitionPlan:
    return TransitionPlan(
        action=TripAction.DISPATCH,
        trip=TripWrite(
            trip_id=trip.id,
            expected_status=TripStatus.DRAFT,
            status=TripStatus.DISPATCHED,
        ),
        vehicle=VehicleWrite(
            vehicle_id=vehicle.id,
            expected_status=VehicleStatus.AVAILABLE,
            status=VehicleStatus.ON_TRIP,
            conflict_reason=RejectionReason.VEHICLE_UNAVAILABLE,
        ),
        driver=DriverWrite(
            driver_id=driver.id,
            expected_status=DriverStatus.AVAILABLE,
            status=DriverStatus.ON_DUTY,
            conflict_reason=RejectionReason.DRIVER_UNAVAILABLE,
        ),
    )


def _plan_complete(
    trip: Trip,
    vehicle: Vehicle,
    driver: Driver,
    command: CompleteTrip,
    now: datetime,
) -> TransitionPlan:
    values = resolve_completion(
        trip,
        vehicle,
        final_odometer=command.final_odometer,
        distance=command.distance,
        actual_fuel_cost=command.actual_fuel_cost,
    )
    return TransitionPlan(
        action=TripAction.COMPLETE,
        trip=TripWrite(
            trip_id=trip.id,
            expected_status=TripStatus.DISPATCHED,
            status=TripStatus.COMPLETED,
            completed_at=now,
            distance=values.distance,
            actual_fuel_cost=values.actual_fuel_cost,
        ),
        vehicle=VehicleWrite(
            vehicle_id=vehicle.id,
            expected_status=VehicleStatus.ON_TRIP,
            status=VehicleStatus.AVAILABLE,
            odometer=values.final_odometer,
        ),
        driver=DriverWrite(
            driver_id=driver.id,
            expected_status=DriverStatus.ON_DUTY,
            status=DriverStatus.AVAILABLE,
        ),
    )


def _plan_cancel(trip: Trip, vehicle: Vehicle, driver: Driver) -> TransitionPlan:
    trip_write = TripWrite(
        trip_id=trip.id,
        expected_status=trip.status,
        status=TripStatus.CANCELLED,
    )
    # A DRAFT trip never claimed its vehicle or driver.
    if trip.status != TripStatus.DISPATCHED:
        return TransitionPlan(action=TripAction.CANCEL, trip=trip_write)

    return TransitionPlan(
        action=TripAction.CANCEL,
        trip=trip_write,
        vehicle=VehicleWrite(
            vehicle_id=vehicle.id,
            expected_status=VehicleStatus.ON_TRIP,
            status=VehicleStatus.AVAILABLE,
        ),
        driver=DriverWrite(
            driver_id=driver.id,
            expected_status=DriverStatus.ON_DUTY,
            status=DriverStatus.AVAILABLE,
        ),
    )
