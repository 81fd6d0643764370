"""
Presentation controller for the patient form and results table.

The controller holds the state a patient-management screen needs - the
rows shown in the table, the values in the form, which actions are
enabled and the status line - and implements the screen's actions on top
of PatientService. It knows nothing about widgets: a UI binds its fields
to these attributes and calls the action methods from its event handlers.

States of the editing area:

    IDLE      fields cleared and read-only, no active record
    CREATING  fields empty and editable, save commits via create
    EDITING   fields loaded from the selected row, save commits via update,
              delete enabled

    IDLE/EDITING --new()-->      CREATING
    any          --select(p)-->  EDITING
    CREATING/EDITING --save() ok | cancel() | delete() ok--> IDLE

All calls are synchronous; a failing store call leaves the state as it
was and is reported through status_message / last_errors.
"""
import logging
from enum import Enum
from typing import Callable, List, Optional

from models.patient import Patient
from repositories.base import Database
from services.outcome import Outcome, OutcomeStatus, capture
from services.patient_service import PatientService
from services.validators import validate_patient_form
from controllers.patient_form import PatientForm

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    CREATING = "creating"
    EDITING = "editing"


class PatientController:
    """
    Drives the patient management screen.

    Args:
        patient_service: Record store used for every read and write.
        confirm_delete: Asked before a delete with the selected patient;
                        returning False cancels the delete.
        database: Handle closed by shutdown(). Optional for callers that
                  manage the handle themselves.
    """

    def __init__(
        self,
        patient_service: PatientService,
        confirm_delete: Callable[[Patient], bool],
        database: Optional[Database] = None,
    ):
        self._service = patient_service
        self._confirm_delete = confirm_delete
        self._database = database

        self.state = EditorState.IDLE
        self.form = PatientForm()
        self.rows: List[Patient] = []
        self.selected: Optional[Patient] = None
        self.status_message = ""
        self.status_is_error = False
        self.last_errors: List[str] = []
        self._apply_state(EditorState.IDLE)

    # =========================================================================
    # DERIVED UI STATE
    # =========================================================================

    @property
    def fields_editable(self) -> bool:
        return self.state is not EditorState.IDLE

    @property
    def save_enabled(self) -> bool:
        return self.state is not EditorState.IDLE

    @property
    def cancel_enabled(self) -> bool:
        return self.state is not EditorState.IDLE

    @property
    def delete_enabled(self) -> bool:
        return self.state is EditorState.EDITING and self.selected is not None

    # =========================================================================
    # STATUS REPORTING
    # =========================================================================

    def _show_status(self, message: str) -> None:
        self.status_message = message
        self.status_is_error = False
        self.last_errors = []

    def _show_error(self, title: str, errors: List[str]) -> None:
        self.status_message = f"{title}: {'; '.join(errors)}" if errors else title
        self.status_is_error = True
        self.last_errors = list(errors)
        logger.warning(title, extra={"errors": errors})

    def _show_outcome_error(self, title: str, outcome: Outcome) -> None:
        self._show_error(title, outcome.errors or [outcome.message])

    def _apply_state(self, state: EditorState) -> None:
        self.state = state
        if state is EditorState.IDLE:
            self.form.clear()
            self.selected = None

    # =========================================================================
    # LIST ACTIONS
    # =========================================================================

    def initialize(self) -> None:
        """Load the table and start in IDLE."""
        self._apply_state(EditorState.IDLE)
        if self.load_all():
            self._show_status(f"Ready. {len(self.rows)} patients loaded.")

    def load_all(self) -> bool:
        """Reload every patient into the table. Returns False if the store failed."""
        outcome = capture(self._service.get_patients)
        if not outcome.ok:
            self._show_outcome_error("Failed to load patients", outcome)
            return False
        self.rows = outcome.value
        self._show_status(f"{len(self.rows)} patients loaded.")
        return True

    def search(self, term: Optional[str]) -> bool:
        """Filter the table; an empty term shows every patient."""
        term = (term or "").strip()
        if not term:
            return self.load_all()

        outcome = capture(self._service.search_patients, term)
        if not outcome.ok:
            self._show_outcome_error("Search failed", outcome)
            return False
        self.rows = outcome.value
        self._show_status(f"{len(self.rows)} patient(s) found.")
        return True

    # =========================================================================
    # EDITING ACTIONS
    # =========================================================================

    def new(self) -> None:
        """Start entering a new patient."""
        self._apply_state(EditorState.CREATING)
        self.form.clear()
        self.selected = None
        self._show_status("New patient admission...")

    def select(self, patient: Optional[Patient]) -> None:
        """Load a table row into the form for editing. None is ignored."""
        if patient is None:
            return
        self.selected = patient
        self.form.load(patient)
        self._apply_state(EditorState.EDITING)
        self._show_status(f"Patient selected: {patient.full_name}")

    def cancel(self) -> None:
        """Discard the current edit."""
        self._apply_state(EditorState.IDLE)
        self._show_status("Editing cancelled.")

    def save(self) -> Outcome:
        """
        Validate the form and commit it.

        CREATING commits via create, EDITING via update of the selected
        id. Form violations are reported all at once and block the store
        call. On success the table is reloaded and the editor returns to IDLE.
        """
        if self.state is EditorState.IDLE:
            outcome = Outcome(
                status=OutcomeStatus.VALIDATION_FAILED,
                errors=["No patient is being edited"],
            )
            self._show_outcome_error("Nothing to save", outcome)
            return outcome

        patient_id = self.selected.id if self.state is EditorState.EDITING else None
        patient = self.form.to_patient(patient_id)

        errors = validate_patient_form(patient)
        if errors:
            outcome = Outcome(status=OutcomeStatus.VALIDATION_FAILED, errors=errors)
            self._show_outcome_error("Validation failed", outcome)
            return outcome

        if self.state is EditorState.CREATING:
            outcome = self._service.try_create(patient)
            verb = "created"
        else:
            outcome = self._service.try_update(patient)
            verb = "updated"

        if not outcome.ok:
            self._show_outcome_error("Database error" if outcome.status is OutcomeStatus.BACKEND_FAILED
                                     else "Patient not saved", outcome)
            return outcome

        self._apply_state(EditorState.IDLE)
        if self.load_all():
            self._show_status(f"Patient '{patient.full_name}' {verb} successfully.")
        return outcome

    def delete(self) -> Optional[Outcome]:
        """
        Delete the selected patient after confirmation.

        Returns:
            The store outcome, or None when nothing was attempted (no
            selection or the confirmation was declined).
        """
        if self.selected is None:
            self._show_error("No patient selected", ["Please select a patient from the list."])
            return None

        patient = self.selected
        if not self._confirm_delete(patient):
            logger.debug(f"Delete of patient {patient.id} declined")
            return None

        outcome = self._service.try_delete(patient.id)
        if not outcome.ok:
            title = ("Delete not possible" if outcome.status is OutcomeStatus.REFERENTIAL_BLOCKED
                     else "Patient not deleted")
            self._show_outcome_error(title, outcome)
            return outcome

        self._apply_state(EditorState.IDLE)
        if self.load_all():
            self._show_status("Patient deleted successfully.")
        return outcome

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def shutdown(self) -> None:
        """Release the database handle. Safe to call more than once."""
        if self._database is not None:
            self._database.close()
            self._database = None
