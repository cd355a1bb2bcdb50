"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health       -- simple health check
GET /api/v1/admin/consistency  -- cross-check trip and resource statuses
"""

from fastapi import APIRouter, Depends, Request

from fleetflow.api.auth import get_principal
from fleetflow.api.dependencies import get_coordinator
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import HealthResponse, ViolationResponse
from fleetflow.config import settings
from fleetflow.domain.entities import Principal
from fleetflow.infrastructure.coordinator import SqlAlchemyCoordinator
from fleetflow.services.consistency import audit_fleet

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/consistency",
    response_model=list[ViolationResponse],
    summary="List trip / resource status mismatches",
)
@limiter.limit(settings.rate_limit)
async def consistency(
    request: Request,
    principal: Principal = Depends(get_principal),
    coordinator: SqlAlchemyCoordinator = Depends(get_coordinator),
):
    return await audit_fleet(coordinator)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
