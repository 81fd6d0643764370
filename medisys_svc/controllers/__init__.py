"""
Presentation controllers.

UI-independent state machines that a form-based front end binds to.
"""
from controllers.patient_controller import EditorState, PatientController
from controllers.patient_form import PatientForm

__all__ = ["EditorState", "PatientController", "PatientForm"]
