"""
Domain entities.

These are read snapshots handed out by the repositories; nothing writes
through them.  State changes are planned in ``lifecycle`` and applied by
the coordinator.

Patterns used
-------------
- **State Pattern** on ``Trip``: valid lifecycle moves come from
  ``TRIP_TRANSITIONS`` (DRAFT -> DISPATCHED -> COMPLETED | CANCELLED).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from .enums import (
    DriverStatus,
    TERMINAL_TRIP_STATUSES,
    TRIP_TRANSITIONS,
    TripStatus,
    VehicleStatus,
    VehicleType,
)


@dataclass(frozen=True)
class Principal:
    """Pre-validated caller identity supplied by the authentication layer."""

    user_id: int
    subject: str
    role: Optional[str] = None


@dataclass(frozen=True)
class Vehicle:
    id: int
    max_capacity: float
    odometer: float = 0.0
    status: VehicleStatus = VehicleStatus.AVAILABLE
    name: str = ""
    model: str = ""
    license_plate: str = ""
    vehicle_type: VehicleType = VehicleType.TRUCK
    initial_odometer: float = 0.0
    acquisition_cost: float = 0.0
    region: str = "Default"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Driver:
    id: int
    license_expiry: date
    status: DriverStatus = DriverStatus.AVAILABLE
    name: str = ""
    license_number: str = ""
    license_category: str = "C"
    safety_score: float = 100.0
    complaints: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_suspended(self) -> bool:
        return self.status == DriverStatus.SUSPENDED

    def license_expired(self, now: datetime) -> bool:
        """A licence lapses at the start of its expiry date."""
        expires_at = datetime.combine(self.license_expiry, time.min, tzinfo=now.tzinfo)
        return expires_at < now


@dataclass(frozen=True)
class Trip:
    id: int
    vehicle_id: int
    driver_id: int
    origin: str = ""
    destination: str = ""
    cargo_weight: float = 0.0
    estimated_fuel_cost: float = 0.0
    actual_fuel_cost: Optional[float] = None
    distance: float = 0.0
    revenue: float = 0.0
    status: TripStatus = TripStatus.DRAFT
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TRIP_STATUSES

    def can_transition_to(self, new_status: TripStatus) -> bool:
        return new_status in TRIP_TRANSITIONS.get(self.status, set())
