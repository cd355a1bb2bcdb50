"""
Vehicle endpoints
=================

POST   /api/v1/vehicles                      -- register a vehicle
GET    /api/v1/vehicles                      -- paged list (status / type / search)
GET    /api/v1/vehicles/{vehicle_id}         -- get one vehicle
PATCH  /api/v1/vehicles/{vehicle_id}         -- edit descriptive fields
DELETE /api/v1/vehicles/{vehicle_id}         -- delete (no active trips)
PUT    /api/v1/vehicles/{vehicle_id}/status  -- maintenance: IN_SHOP / RETIRED / AVAILABLE
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from fleetflow.api.auth import get_principal
from fleetflow.api.dependencies import get_fleet_registry
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import (
    ErrorResponse,
    VehicleCreateRequest,
    VehicleListResponse,
    VehicleResponse,
    VehicleStatusRequest,
    VehicleUpdateRequest,
)
from fleetflow.config import settings
from fleetflow.domain.entities import Principal
from fleetflow.domain.enums import VehicleStatus, VehicleType
from fleetflow.services.fleet import FleetRegistry

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.post(
    "",
    status_code=201,
    response_model=VehicleResponse,
    summary="Register a vehicle",
    responses={409: {"model": ErrorResponse, "description": "Duplicate plate"}},
)
@limiter.limit(settings.rate_limit)
async def create_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.create_vehicle(**body.model_dump())


@router.get("", response_model=VehicleListResponse, summary="List vehicles")
@limiter.limit(settings.rate_limit)
async def list_vehicles(
    request: Request,
    status: Optional[VehicleStatus] = None,
    vehicle_type: Optional[VehicleType] = Query(None, alias="type"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    vehicles, total = await registry.list_vehicles(
        status=status,
        vehicle_type=vehicle_type,
        search=search,
        page=page,
        limit=limit,
    )
    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
        total=total,
        page=page,
        limit=limit,
    )


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get a vehicle",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_vehicle(
    request: Request,
    vehicle_id: int,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.get_vehicle(vehicle_id)


@router.patch(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Edit vehicle details",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def update_vehicle(
    request: Request,
    vehicle_id: int,
    body: VehicleUpdateRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.update_vehicle(
        vehicle_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.delete(
    "/{vehicle_id}",
    status_code=204,
    summary="Delete a vehicle",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def delete_vehicle(
    request: Request,
    vehicle_id: int,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    await registry.delete_vehicle(principal, vehicle_id)


@router.put(
    "/{vehicle_id}/status",
    response_model=VehicleResponse,
    summary="Move a vehicle in or out of service",
    description="ON_TRIP is set and cleared only by the trip lifecycle.",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def change_vehicle_status(
    request: Request,
    vehicle_id: int,
    body: VehicleStatusRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.change_vehicle_status(principal, vehicle_id, body.status)
