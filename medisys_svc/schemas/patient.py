"""
Pydantic schemas for patient-related API operations.

Request schemas only check types and lengths. The business rules (future
birth dates, gender codes) are enforced by PatientService so the API and
the presentation controller reject the same records.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.patient import Patient


class PatientCreate(BaseModel):
    """Schema for creating a new patient or replacing an existing one."""

    first_name: str = Field(..., min_length=1, max_length=100, description="First name", examples=["Anna"])
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name", examples=["Muster"])
    birth_date: date = Field(..., description="Birth date, not in the future", examples=["1990-05-01"])
    gender: Optional[str] = Field(None, max_length=1, description="Gender code: M, W or D", examples=["W"])
    street: str = Field("", max_length=200, description="Street and house number")
    postal_code: str = Field("", max_length=20, description="Postal code", examples=["3000"])
    city: str = Field("", max_length=100, description="City", examples=["Bern"])
    phone: str = Field("", max_length=50, description="Phone number")
    email: str = Field("", max_length=200, description="Email address", examples=["anna@example.ch"])
    insurance_number: str = Field(..., min_length=1, max_length=50, description="Insurance number", examples=["756.1234"])
    insurance_provider: str = Field(..., min_length=1, max_length=100, description="Health insurance provider", examples=["CSS"])

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "first_name": "Anna",
                "last_name": "Muster",
                "birth_date": "1990-05-01",
                "gender": "W",
                "insurance_number": "756.1234",
                "insurance_provider": "CSS",
            }
        }
    )

    def to_patient(self, patient_id: Optional[int] = None) -> Patient:
        return Patient(id=patient_id, **self.model_dump())


class PatientUpdate(PatientCreate):
    """Schema for replacing all fields of an existing patient."""


class PatientResponse(BaseModel):
    """Schema for patient response."""

    id: int = Field(..., description="Unique patient identifier", examples=[1])
    first_name: str
    last_name: str
    birth_date: date
    gender: str
    street: str = ""
    postal_code: str = ""
    city: str = ""
    phone: str = ""
    email: str = ""
    insurance_number: str
    insurance_provider: str

    model_config = ConfigDict(from_attributes=True)
