"""
Domain models for the MediSys service.
"""
from models.patient import Gender, Patient, PATIENT_COLUMNS

__all__ = ["Gender", "Patient", "PATIENT_COLUMNS"]
