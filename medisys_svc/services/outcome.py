"""
Tagged results for patient write operations.

The HTTP layer lets MediSysError subclasses propagate to the exception
handlers. Callers that prefer a value over an exception (the presentation
controller) use PatientService.try_* which return an Outcome instead.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List

from core.exceptions import (
    MediSysError,
    PatientNotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    REFERENTIAL_BLOCKED = "referential_blocked"
    NOT_FOUND = "not_found"
    BACKEND_FAILED = "backend_failed"


@dataclass
class Outcome:
    """Result of a write: either a value (the patient id) or a failure kind with messages."""

    status: OutcomeStatus
    value: Any = None
    errors: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Outcome":
        return cls(status=OutcomeStatus.SUCCESS, value=value, message=message)

    @classmethod
    def from_error(cls, exc: MediSysError) -> "Outcome":
        """Map a domain exception to its tagged failure."""
        if isinstance(exc, ValidationError):
            status = OutcomeStatus.VALIDATION_FAILED
            errors = exc.errors or [exc.detail]
        elif isinstance(exc, ReferentialIntegrityError):
            status = OutcomeStatus.REFERENTIAL_BLOCKED
            errors = [exc.detail]
        elif isinstance(exc, PatientNotFoundError):
            status = OutcomeStatus.NOT_FOUND
            errors = [exc.detail]
        else:
            status = OutcomeStatus.BACKEND_FAILED
            errors = [exc.detail]
        return cls(status=status, errors=errors, message=exc.detail)


def capture(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
    """
    Run operation and fold its result or domain error into an Outcome.

    Only MediSysError is folded; programming errors still raise.
    """
    try:
        value = operation(*args, **kwargs)
    except MediSysError as exc:
        return Outcome.from_error(exc)
    return Outcome.success(value)
