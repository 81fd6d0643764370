"""
Service layer for patient operations.

This service is the record store contract: it enforces the write
invariants, runs the referential guard before deletes and turns
repository results into domain errors.

Architecture:
    API Layer (routers)        ┐
    PatientController (forms)  ┴→ PatientService → PatientRepository → Database

Dependency Injection:
    PatientService receives its repository via constructor injection.
    Use core.dependencies.get_patient_service() in routers with Depends().
"""
import logging
from datetime import date
from typing import Callable, List, Optional

from core.exceptions import (
    BackendError,
    PatientNotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from models.patient import Patient
from repositories import PatientRepository
from services.outcome import Outcome, capture
from services.validators import validate_patient_invariants

logger = logging.getLogger(__name__)


class PatientService:
    """
    Service layer for patient operations.

    Every mutating call either completes fully or raises before anything
    is written. Nothing is retried.
    """

    def __init__(
        self,
        patient_repository: PatientRepository,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize the patient service.

        Args:
            patient_repository: PatientRepository instance for data access.
            clock: Returns the current day for the birth date rule.
                   Defaults to the local calendar day.
        """
        self._repo = patient_repository
        self._clock = clock

    def _check_invariants(self, patient: Patient) -> None:
        today = self._clock() if self._clock else None
        errors = validate_patient_invariants(patient, today)
        if errors:
            logger.warning(
                "Patient rejected by validation",
                extra={"patient_id": patient.id, "errors": errors}
            )
            raise ValidationError(errors=errors)

    # =========================================================================
    # CREATE / UPDATE
    # =========================================================================

    def create_patient(self, patient: Patient) -> Patient:
        """
        Persist a new patient.

        Args:
            patient: Record without an id. The store-assigned id is set on it.

        Returns:
            Patient: The same record, now carrying its id.

        Raises:
            ValidationError: Birth date in the future or gender not M/W/D.
            BackendError: The insert failed or wrote no row.
        """
        self._check_invariants(patient)

        if not self._repo.insert(patient):
            raise BackendError(detail="Patient could not be saved", operation="insert")

        logger.info(f"Patient created: {patient.full_name} (id={patient.id})")
        return patient

    def update_patient(self, patient: Patient) -> Patient:
        """
        Replace all fields of an existing patient.

        Raises:
            ValidationError: Invariants broken or the record has no id.
            PatientNotFoundError: No row has this id.
        """
        if patient.is_new:
            raise ValidationError(errors=["Patient has no identifier; create it first"])
        self._check_invariants(patient)

        if not self._repo.update(patient):
            logger.warning(f"Update matched no patient (id={patient.id})")
            raise PatientNotFoundError(patient_id=patient.id)

        logger.info(f"Patient updated: {patient.full_name} (id={patient.id})")
        return patient

    # =========================================================================
    # READ
    # =========================================================================

    def get_patients(self) -> List[Patient]:
        """
        Get all patients.

        Returns:
            List of patients ordered by last name, then first name.
        """
        return self._repo.get_all()

    def get_patient(self, patient_id: int) -> Patient:
        """
        Get a patient by id.

        Raises:
            PatientNotFoundError: If no patient with this id exists.
        """
        patient = self._repo.get_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id=patient_id)
        return patient

    def get_patient_or_none(self, patient_id: int) -> Optional[Patient]:
        """Get a patient by id, returning None if not found."""
        return self._repo.get_by_id(patient_id)

    def search_patients(self, term: str) -> List[Patient]:
        """
        Substring search over first name, last name, insurance number and email.

        An empty term is passed through unchanged; callers wanting "all
        patients" for an empty search box call get_patients() themselves.
        """
        results = self._repo.search(term)
        logger.debug(f"Search '{term}' matched {len(results)} patient(s)")
        return results

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_patient(self, patient_id: int) -> bool:
        """
        Delete a patient unless appointments or invoices reference it.

        Returns:
            bool: True if a row was removed, False if the id did not exist.

        Raises:
            ReferentialIntegrityError: Dependent rows exist; nothing is deleted.
        """
        dependents = self._repo.count_dependents(patient_id)
        if any(dependents.values()):
            logger.warning(
                f"Delete blocked for patient {patient_id}: dependent records exist",
                extra={"dependents": dependents}
            )
            raise ReferentialIntegrityError(patient_id=patient_id, dependents=dependents)

        removed = self._repo.delete(patient_id)
        if removed:
            logger.info(f"Patient deleted (id={patient_id})")
        return removed

    # =========================================================================
    # TAGGED-RESULT VARIANTS
    # =========================================================================

    def try_create(self, patient: Patient) -> Outcome:
        """create_patient as a single fallible call; success carries the new id."""
        outcome = capture(self.create_patient, patient)
        if outcome.ok:
            outcome.value = patient.id
        return outcome

    def try_update(self, patient: Patient) -> Outcome:
        """update_patient as a single fallible call; success carries the id."""
        outcome = capture(self.update_patient, patient)
        if outcome.ok:
            outcome.value = patient.id
        return outcome

    def try_delete(self, patient_id: int) -> Outcome:
        """
        delete_patient as a single fallible call.

        A delete that removed no row is reported as NOT_FOUND.
        """
        outcome = capture(self.delete_patient, patient_id)
        if outcome.ok and not outcome.value:
            return Outcome.from_error(PatientNotFoundError(patient_id=patient_id))
        if outcome.ok:
            outcome.value = patient_id
        return outcome
