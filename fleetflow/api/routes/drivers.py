"""
Driver endpoints
================

POST   /api/v1/drivers                     -- register a driver
GET    /api/v1/drivers                     -- list drivers (status / search)
GET    /api/v1/drivers/{driver_id}         -- get one driver
PATCH  /api/v1/drivers/{driver_id}         -- edit licence / profile fields
DELETE /api/v1/drivers/{driver_id}         -- delete (no active trips)
PUT    /api/v1/drivers/{driver_id}/status  -- compliance: SUSPENDED / OFF_DUTY / AVAILABLE
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from fleetflow.api.auth import get_principal
from fleetflow.api.dependencies import get_fleet_registry
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import (
    DriverCreateRequest,
    DriverResponse,
    DriverStatusRequest,
    DriverUpdateRequest,
    ErrorResponse,
)
from fleetflow.config import settings
from fleetflow.domain.entities import Principal
from fleetflow.domain.enums import DriverStatus
from fleetflow.services.fleet import FleetRegistry

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post(
    "",
    status_code=201,
    response_model=DriverResponse,
    summary="Register a driver",
    responses={
        409: {"model": ErrorResponse, "description": "Duplicate licence number"},
    },
)
@limiter.limit(settings.rate_limit)
async def create_driver(
    request: Request,
    body: DriverCreateRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.create_driver(**body.model_dump())


@router.get("", response_model=list[DriverResponse], summary="List drivers")
@limiter.limit(settings.rate_limit)
async def list_drivers(
    request: Request,
    status: Optional[DriverStatus] = None,
    search: Optional[str] = None,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.list_drivers(status=status, search=search)


@router.get(
    "/{driver_id}",
    response_model=DriverResponse,
    summary="Get a driver",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_driver(
    request: Request,
    driver_id: int,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.get_driver(driver_id)


@router.patch(
    "/{driver_id}",
    response_model=DriverResponse,
    summary="Edit driver details",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def update_driver(
    request: Request,
    driver_id: int,
    body: DriverUpdateRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.update_driver(
        driver_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )


@router.delete(
    "/{driver_id}",
    status_code=204,
    summary="Delete a driver",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def delete_driver(
    request: Request,
    driver_id: int,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    await registry.delete_driver(principal, driver_id)


@router.put(
    "/{driver_id}/status",
    response_model=DriverResponse,
    summary="Suspend, stand down or reinstate a driver",
    description="ON_DUTY is set and cleared only by the trip lifecycle.",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def change_driver_status(
    request: Request,
    driver_id: int,
    body: DriverStatusRequest,
    principal: Principal = Depends(get_principal),
    registry: FleetRegistry = Depends(get_fleet_registry),
):
    return await registry.change_driver_status(principal, driver_id, body.status)
