"""
Validation rules for patient records.

Two levels of checks exist:
- validate_patient_invariants: the rules the store enforces before every
  insert and update (birth date not in the future, gender in M/W/D)
- validate_patient_form: the stricter client-side check run before a save,
  covering required fields and the email shape

Both return the full list of violations instead of stopping at the first.
"""
import logging
import re
from datetime import date
from typing import List, Optional

from core.datetime_utils import is_future_date
from models.patient import Gender, Patient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

GENDER_MESSAGE = f"Gender must be one of {', '.join(Gender.values())}"
FUTURE_BIRTH_DATE_MESSAGE = "Birth date must not be in the future"


def is_valid_email(email: str) -> bool:
    """Basic local@domain shape check."""
    return EMAIL_PATTERN.match(email) is not None


def validate_patient_invariants(patient: Patient, today: Optional[date] = None) -> List[str]:
    """
    Check the rules that guard every write.

    Args:
        patient: Record about to be inserted or updated.
        today: Reference day for the birth date check. Defaults to today.

    Returns:
        List[str]: Violations, empty if the record may be written.
    """
    errors = []

    if patient.birth_date is None:
        errors.append("Birth date is required")
    elif not patient.is_valid_birth_date(today):
        errors.append(FUTURE_BIRTH_DATE_MESSAGE)

    if not patient.is_valid_gender():
        errors.append(GENDER_MESSAGE)

    return errors


def validate_patient_form(patient: Patient, today: Optional[date] = None) -> List[str]:
    """
    Check a record collected from the form before it is handed to the store.

    Required: first name, last name, birth date (not in the future),
    gender, insurance number and insurance provider. Email is optional
    but must look like local@domain when given.

    Returns:
        List[str]: Every violation found, in form order.
    """
    errors = []

    if not (patient.first_name or "").strip():
        errors.append("First name is required")
    if not (patient.last_name or "").strip():
        errors.append("Last name is required")

    if patient.birth_date is None:
        errors.append("Birth date is required")
    elif is_future_date(patient.birth_date, today):
        errors.append(FUTURE_BIRTH_DATE_MESSAGE)

    if not patient.gender:
        errors.append("Gender is required")
    elif not patient.is_valid_gender():
        errors.append(GENDER_MESSAGE)

    if not (patient.insurance_number or "").strip():
        errors.append("Insurance number is required")
    if not (patient.insurance_provider or "").strip():
        errors.append("Insurance provider is required")

    email = (patient.email or "").strip()
    if email and not is_valid_email(email):
        errors.append("Email format is invalid")

    if errors:
        logger.debug("Form validation failed", extra={"errors": errors})
    return errors
