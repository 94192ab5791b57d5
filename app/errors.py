"""
app/errors.py

Error taxonomy for the compliance engine.

Every error carries structured :class:`ErrorDetail` entries and renders
itself with ``to_dict()`` so routers can pass it straight through as the
HTTP ``detail`` payload.

    NotFoundError            -> 404
    ScheduleValidationError  -> 422
    ScheduleConflictError    -> 409
    DocumentValidationError  -> 422
    ComputationError         -> 500 (generic message, internals logged only)
    PersistenceError         -> 500 (generic message, internals logged only)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True)
class ErrorDetail:
    """
    One field-level or item-level failure.
    """

    code: str
    message: str
    field: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "context": self.context,
        }


class ComplianceError(Exception):
    """Base class for all compliance engine failures."""

    def __init__(self, message: str, *, errors: Sequence[ErrorDetail] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [error.to_dict() for error in self.errors],
        }


class NotFoundError(ComplianceError):
    """Raised when an entity, template or document id does not resolve."""

    def __init__(self, resource: str, resource_id: Any) -> None:
        super().__init__(
            f"{resource} not found: {resource_id}",
            errors=[
                ErrorDetail(
                    code="not_found",
                    message=f"{resource} does not exist.",
                    field=f"{resource}_id",
                    context={"id": str(resource_id)},
                )
            ],
        )
        self.resource = resource
        self.resource_id = resource_id


class ScheduleValidationError(ComplianceError, ValueError):
    """Raised when a scheduling request is malformed or not allowed."""


class DocumentValidationError(ComplianceError, ValueError):
    """Raised when document metadata is inconsistent with its owner."""


class ScheduleConflictError(ComplianceError):
    """
    Raised when selections collide with inspections that already exist.

    The whole batch is rejected; ``errors`` lists every colliding pair.
    """


class ComputationError(ComplianceError, RuntimeError):
    """
    Raised on an internal invariant violation. This is a bug, never a
    user error; callers log it and answer with a generic failure.
    """


class PersistenceError(ComplianceError, RuntimeError):
    """Raised when the database rejects a read or write."""
