"""Domain enumerations and state-transition rules."""

import enum


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    ON_TRIP = "ON_TRIP"
    IN_SHOP = "IN_SHOP"
    RETIRED = "RETIRED"


class DriverStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    ON_DUTY = "ON_DUTY"
    OFF_DUTY = "OFF_DUTY"
    SUSPENDED = "SUSPENDED"


class TripStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    DISPATCHED = "DISPATCHED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TripAction(str, enum.Enum):
    DISPATCH = "dispatch"
    COMPLETE = "complete"
    CANCEL = "cancel"


class VehicleType(str, enum.Enum):
    TRUCK = "TRUCK"
    VAN = "VAN"
    BIKE = "BIKE"


class RejectionReason(str, enum.Enum):
    VEHICLE_UNAVAILABLE = "VEHICLE_UNAVAILABLE"
    DRIVER_UNAVAILABLE = "DRIVER_UNAVAILABLE"
    DRIVER_SUSPENDED = "DRIVER_SUSPENDED"
    LICENSE_EXPIRED = "LICENSE_EXPIRED"
    CARGO_TOO_HEAVY = "CARGO_TOO_HEAVY"
    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    ODOMETER_ROLLBACK = "ODOMETER_ROLLBACK"
    INVALID_STATE = "INVALID_STATE"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.DRAFT: {TripStatus.DISPATCHED, TripStatus.CANCELLED},
    TripStatus.DISPATCHED: {TripStatus.COMPLETED, TripStatus.CANCELLED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}

TERMINAL_TRIP_STATUSES = frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED})
ACTIVE_TRIP_STATUSES = frozenset({TripStatus.DRAFT, TripStatus.DISPATCHED})

ACTION_TARGETS: dict[TripAction, TripStatus] = {
    TripAction.DISPATCH: TripStatus.DISPATCHED,
    TripAction.COMPLETE: TripStatus.COMPLETED,
    TripAction.CANCEL: TripStatus.CANCELLED,
}

# Status moves the maintenance / compliance collaborators may make on their own.
# ON_TRIP and ON_DUTY belong to the trip lifecycle and are never reachable here.
VEHICLE_STATUS_CHANGES: dict[VehicleStatus, set[VehicleStatus]] = {
    VehicleStatus.AVAILABLE: {VehicleStatus.IN_SHOP, VehicleStatus.RETIRED},
    VehicleStatus.IN_SHOP: {VehicleStatus.AVAILABLE, VehicleStatus.RETIRED},
    VehicleStatus.ON_TRIP: set(),
    VehicleStatus.RETIRED: set(),
}

DRIVER_STATUS_CHANGES: dict[DriverStatus, set[DriverStatus]] = {
    DriverStatus.AVAILABLE: {DriverStatus.OFF_DUTY, DriverStatus.SUSPENDED},
    DriverStatus.OFF_DUTY: {DriverStatus.AVAILABLE, DriverStatus.SUSPENDED},
    DriverStatus.SUSPENDED: {DriverStatus.AVAILABLE, DriverStatus.OFF_DUTY},
    DriverStatus.ON_DUTY: set(),
}
