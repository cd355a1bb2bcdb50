"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel

from fleetflow.domain.enums import DriverStatus, TripStatus, VehicleStatus, VehicleType
from fleetflow.domain.lifecycle import (
    CancelTrip,
    CompleteTrip,
    DispatchTrip,
    TripCommand,
)


# ── Trip requests ─────────────────────────────────────────────────────


class TripCreateRequest(BaseModel):
    vehicle_id: int
    driver_id: int
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    cargo_weight: float = Field(0.0, ge=0)
    estimated_fuel_cost: float = Field(0.0, ge=0)
    revenue: float = Field(0.0, ge=0)


class TripPatchRequest(BaseModel):
    origin: Optional[str] = Field(None, min_length=1, max_length=255)
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    cargo_weight: Optional[float] = Field(None, ge=0)
    estimated_fuel_cost: Optional[float] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)

    model_config = {"extra": "forbid"}


# Transition payloads: one model per action, so fields that do not belong
# to an action (e.g. ``final_odometer`` on a dispatch) are rejected.


class DispatchRequest(BaseModel):
    action: Literal["dispatch"]

    model_config = {"extra": "forbid"}

    def to_command(self) -> DispatchTrip:
        return DispatchTrip()


class CompleteRequest(BaseModel):
    action: Literal["complete"]
    final_odometer: Optional[float] = Field(None, ge=0)
    distance: Optional[float] = Field(None, ge=0)
    actual_fuel_cost: Optional[float] = Field(None, ge=0)

    model_config = {"extra": "forbid"}

    def to_command(self) -> CompleteTrip:
        return CompleteTrip(
            final_odometer=self.final_odometer,
            distance=self.distance,
            actual_fuel_cost=self.actual_fuel_cost,
        )


class CancelRequest(BaseModel):
    action: Literal["cancel"]

    model_config = {"extra": "forbid"}

    def to_command(self) -> CancelTrip:
        return CancelTrip()


class TransitionRequest(
    RootModel[
        Annotated[
            Union[DispatchRequest, CompleteRequest, CancelRequest],
            Field(discriminator="action"),
        ]
    ]
):
    def to_command(self) -> TripCommand:
        return self.root.to_command()


# ── Vehicle / driver requests ─────────────────────────────────────────


class VehicleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    license_plate: str = Field(..., min_length=1, max_length=32)
    model: str = Field("", max_length=120)
    vehicle_type: VehicleType = VehicleType.TRUCK
    max_capacity: float = Field(0.0, ge=0)
    odometer: float = Field(0.0, ge=0)
    acquisition_cost: float = Field(0.0, ge=0)
    region: str = Field("Default", max_length=64)


class VehicleUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    model: Optional[str] = Field(None, max_length=120)
    vehicle_type: Optional[VehicleType] = None
    max_capacity: Optional[float] = Field(None, ge=0)
    acquisition_cost: Optional[float] = Field(None, ge=0)
    region: Optional[str] = Field(None, max_length=64)

    model_config = {"extra": "forbid"}


class VehicleStatusRequest(BaseModel):
    status: VehicleStatus


class DriverCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    license_number: str = Field(..., min_length=1, max_length=32)
    license_expiry: date
    license_category: str = Field("C", max_length=8)
    status: DriverStatus = DriverStatus.AVAILABLE


class DriverUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    license_expiry: Optional[date] = None
    license_category: Optional[str] = Field(None, max_length=8)
    safety_score: Optional[float] = Field(None, ge=0, le=100)
    complaints: Optional[int] = Field(None, ge=0)

    model_config = {"extra": "forbid"}


class DriverStatusRequest(BaseModel):
    status: DriverStatus


# ── Responses ─────────────────────────────────────────────────────────


class TripResponse(BaseModel):
    id: int
    vehicle_id: int
    driver_id: int
    origin: str
    destination: str
    cargo_weight: float
    estimated_fuel_cost: float
    actual_fuel_cost: Optional[float] = None
    distance: float
    revenue: float
    status: TripStatus
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VehicleResponse(BaseModel):
    id: int
    name: str
    model: str
    license_plate: str
    vehicle_type: VehicleType
    max_capacity: float
    odometer: float
    initial_odometer: float
    acquisition_cost: float
    region: str
    status: VehicleStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VehicleListResponse(BaseModel):
    vehicles: list[VehicleResponse]
    total: int
    page: int
    limit: int


class DriverResponse(BaseModel):
    id: int
    name: str
    license_number: str
    license_expiry: date
    license_category: str
    safety_score: float
    complaints: int
    status: DriverStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ViolationResponse(BaseModel):
    resource: str
    resource_id: int
    problem: str

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: dict = {}
