"""
Trip endpoints
==============

POST  /api/v1/trips                         -- create a DRAFT trip
GET   /api/v1/trips                         -- list trips (filter by status / search)
GET   /api/v1/trips/{trip_id}               -- get one trip
PATCH /api/v1/trips/{trip_id}               -- edit fields of a non-terminal trip
POST  /api/v1/trips/{trip_id}/transitions   -- dispatch / complete / cancel
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from fleetflow.api.auth import get_principal
from fleetflow.api.dependencies import get_trip_manager
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import (
    ErrorResponse,
    TransitionRequest,
    TripCreateRequest,
    TripPatchRequest,
    TripResponse,
)
from fleetflow.config import settings
from fleetflow.domain.entities import Principal
from fleetflow.domain.enums import TripStatus
from fleetflow.services.trips import TripLifecycleManager

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    summary="Create a trip in DRAFT",
    responses={
        400: {"model": ErrorResponse, "description": "Vehicle / driver not eligible"},
        404: {"model": ErrorResponse, "description": "Vehicle or driver not found"},
    },
)
@limiter.limit(settings.rate_limit)
async def create_trip(
    request: Request,
    body: TripCreateRequest,
    principal: Principal = Depends(get_principal),
    manager: TripLifecycleManager = Depends(get_trip_manager),
):
    return await manager.create_trip(
        principal,
        vehicle_id=body.vehicle_id,
        driver_id=body.driver_id,
        origin=body.origin,
        destination=body.destination,
        cargo_weight=body.cargo_weight,
        estimated_fuel_cost=body.estimated_fuel_cost,
        revenue=body.revenue,
    )


@router.get("", response_model=list[TripResponse], summary="List trips")
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    status: Optional[TripStatus] = None,
    search: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    manager: TripLifecycleManager = Depends(get_trip_manager),
):
    return await manager.list_trips(status=status, search=search)


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Get a trip",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: int,
    principal: Principal = Depends(get_principal),
    manager: TripLifecycleManager = Depends(get_trip_manager),
):
    return await manager.get_trip(trip_id)


@router.patch(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Edit a non-terminal trip",
    description=(
        "Plain field patch. Never touches vehicle or driver status and does "
        "not re-check cargo weight."
    ),
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def patch_trip(
    request: Request,
    trip_id: int,
    body: TripPatchRequest,
    principal: Principal = Depends(get_principal),
    manager: TripLifecycleManager = Depends(get_trip_manager),
):
    return await manager.patch_trip(
        principal, trip_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.post(
    "/{trip_id}/transitions",
    response_model=TripResponse,
    summary="Dispatch, complete or cancel a trip",
    description=(
        "Moves the trip through DRAFT -> DISPATCHED -> COMPLETED, or to "
        "CANCELLED, updating the vehicle and driver status in the same "
        "transaction."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Eligibility check failed"},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Invalid state or conflict"},
    },
)
@limiter.limit(settings.rate_limit)
async def transition_trip(
    request: Request,
    trip_id: int,
    body: TransitionRequest,
    principal: Principal = Depends(get_principal),
    manager: TripLifecycleManager = Depends(get_trip_manager),
):
    return await manager.transition_trip(principal, trip_id, body.to_command())
