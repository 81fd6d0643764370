"""
Service layer for business logic.

This module contains the patient record store and its tagged results.
"""
from services.outcome import Outcome, OutcomeStatus
from services.patient_service import PatientService

__all__ = [
    "Outcome",
    "OutcomeStatus",
    "PatientService",
]
