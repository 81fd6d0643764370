"""
Shared exception classes and error handling utilities for the MediSys service.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Three error kinds reach the caller:
- ValidationError: a record breaks a field rule, nothing was written
- ReferentialIntegrityError: delete blocked by dependent rows, nothing changed
- BackendError: driver or connectivity failure, message preserved verbatim

Usage:
    from core.exceptions import ValidationError, ReferentialIntegrityError

    # In service layer - raise domain exceptions
    raise ValidationError(errors=["Gender must be one of M, W, D"])

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class MediSysError(Exception):
    """
    Base exception for all MediSys domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# PATIENT EXCEPTIONS
# =============================================================================

class ValidationError(MediSysError):
    """Raised when a patient record breaks one or more field rules."""

    status_code = 422  # Unprocessable Content
    detail = "Patient data is invalid"

    def __init__(self, errors: Optional[List[str]] = None, **kwargs: Any):
        self.errors = list(errors or [])
        detail = "; ".join(self.errors) if self.errors else self.detail
        super().__init__(detail=detail, errors=self.errors, **kwargs)


class ReferentialIntegrityError(MediSysError):
    """Raised when a patient still has appointments or invoices referencing it."""

    status_code = status.HTTP_409_CONFLICT
    detail = (
        "Patient cannot be deleted: linked appointments or invoices exist. "
        "Patient data should be marked inactive instead."
    )

    def __init__(self, patient_id: Optional[int] = None, **kwargs: Any):
        super().__init__(patient_id=patient_id, **kwargs)


class PatientNotFoundError(MediSysError):
    """Raised when a patient is not found in the database."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Patient not found"

    def __init__(self, patient_id: Optional[int] = None, **kwargs: Any):
        detail = f"Patient {patient_id} not found" if patient_id is not None else self.detail
        super().__init__(detail=detail, patient_id=patient_id, **kwargs)


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class BackendError(MediSysError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, detail: Optional[str] = None, operation: Optional[str] = None, **kwargs: Any):
        if detail is None and operation:
            detail = f"Database error during {operation}"
        super().__init__(detail=detail, operation=operation, **kwargs)


class DatabaseConnectionError(BackendError):
    """Raised when the database connection cannot be opened."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Failed to connect to database"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def medisys_exception_handler(
    request: Request,
    exc: MediSysError
) -> JSONResponse:
    """
    Handle MediSysError exceptions and return consistent JSON responses.

    This handler logs the error and returns a standardized JSON error response.
    """
    logger.warning(
        f"MediSysError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.

    Example:
        app = FastAPI()
        setup_exception_handlers(app)
    """
    app.add_exception_handler(MediSysError, medisys_exception_handler)
