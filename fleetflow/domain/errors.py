"""
Error taxonomy shared by every layer.

Errors carry a stable ``code`` and a ``details`` dict; the API layer maps
them onto HTTP responses (see ``fleetflow.api.errors``).  Only
``ConflictError`` is worth retrying, and only from a fresh read.
"""

from __future__ import annotations

from typing import Any, Optional

from .enums import RejectionReason


class FleetError(Exception):
    """Base class for all domain errors."""

    code = "FLEET_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(FleetError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, {"resource": resource, "id": resource_id})
        self.resource = resource
        self.resource_id = resource_id


class InvalidStateError(FleetError):
    """The requested transition does not apply to the current status."""

    code = RejectionReason.INVALID_STATE.value


class EligibilityError(FleetError):
    """A guard rejected the operation; ``reason`` says which one."""

    def __init__(
        self,
        reason: RejectionReason,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.reason = reason

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.reason.value


class ConflictError(FleetError):
    """A concurrent writer invalidated the snapshot this operation read."""

    code = "CONFLICT"


class DuplicateError(FleetError):
    code = "DUPLICATE"


class UneditableFieldError(FleetError):
    """An update named fields the caller may not write directly."""

    code = "UNEDITABLE_FIELDS"

    def __init__(self, fields: set[str]):
        names = sorted(fields)
        super().__init__(
            f"Fields cannot be updated: {', '.join(names)}", {"fields": names}
        )
