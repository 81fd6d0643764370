"""
Validation utilities for services.
"""
from services.validators.patient_validator import (
    validate_patient_invariants,
    validate_patient_form,
    is_valid_email,
    EMAIL_PATTERN,
)

__all__ = [
    "validate_patient_invariants",
    "validate_patient_form",
    "is_valid_email",
    "EMAIL_PATTERN",
]
