"""
Exception handlers mapping domain errors onto HTTP responses.

Every error body has the same shape::

    {"error_code": "...", "message": "...", "details": {...}}
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from fleetflow.domain.errors import (
    ConflictError,
    DuplicateError,
    EligibilityError,
    FleetError,
    InvalidStateError,
    NotFoundError,
    UneditableFieldError,
)

STATUS_CODES: dict[type[FleetError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    EligibilityError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    DuplicateError: status.HTTP_409_CONFLICT,
    UneditableFieldError: 422,
}

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
}


def status_code_for(exc: FleetError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return status.HTTP_400_BAD_REQUEST


def _error_body(error_code: str, message: str, details: dict) -> dict:
    return {"error_code": error_code, "message": message, "details": details}


async def fleet_error_handler(request: Request, exc: FleetError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(exc),
        content=jsonable_encoder(_error_body(exc.code, exc.message, exc.details)),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"), str(exc.detail), {}
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(
            _error_body("VALIDATION_ERROR", "Validation error", {"errors": exc.errors()})
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FleetError, fleet_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
