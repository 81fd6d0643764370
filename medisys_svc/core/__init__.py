"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Exceptions: Domain-specific exception classes with HTTP status codes
- Date utilities: birth date parsing and the "not in the future" check

Dependency injection functions live in core.dependencies and are imported
from there directly, since they depend on the repository and service layers.
"""
from core.config import settings, Settings

from core.exceptions import (
    MediSysError,
    ValidationError,
    ReferentialIntegrityError,
    PatientNotFoundError,
    BackendError,
    DatabaseConnectionError,
    setup_exception_handlers,
)

from core.datetime_utils import (
    today,
    is_future_date,
    parse_date,
    to_db_string,
    from_db_string,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Exceptions
    "MediSysError",
    "ValidationError",
    "ReferentialIntegrityError",
    "PatientNotFoundError",
    "BackendError",
    "DatabaseConnectionError",
    "setup_exception_handlers",
    # Date utilities
    "today",
    "is_future_date",
    "parse_date",
    "to_db_string",
    "from_db_string",
]
