"""
Editable form state for one patient.
"""
from dataclasses import dataclass, fields
from datetime import date
from typing import Optional

from models.patient import Patient


@dataclass
class PatientForm:
    """Raw field values as a UI would hold them; text fields are trimmed when collected."""

    first_name: str = ""
    last_name: str = ""
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    street: str = ""
    postal_code: str = ""
    city: str = ""
    phone: str = ""
    email: str = ""
    insurance_number: str = ""
    insurance_provider: str = ""

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, f.default)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) == f.default for f in fields(self))

    def load(self, patient: Patient) -> None:
        """Copy a record's fields into the form."""
        for f in fields(self):
            setattr(self, f.name, getattr(patient, f.name))

    def to_patient(self, patient_id: Optional[int] = None) -> Patient:
        """Collect the form into a record; text is stripped, an empty gender becomes None."""
        def text(value: Optional[str]) -> str:
            return (value or "").strip()

        return Patient(
            id=patient_id,
            first_name=text(self.first_name),
            last_name=text(self.last_name),
            birth_date=self.birth_date,
            gender=text(self.gender) or None,
            street=text(self.street),
            postal_code=text(self.postal_code),
            city=text(self.city),
            phone=text(self.phone),
            email=text(self.email),
            insurance_number=text(self.insurance_number),
            insurance_provider=text(self.insurance_provider),
        )
