"""
Domain model for patients.
"""
from dataclasses import asdict, dataclass, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from core.datetime_utils import from_db_string, is_future_date, parse_date_safe


class Gender(str, Enum):
    """Gender codes accepted by the practice (male, female, diverse)."""

    M = "M"
    W = "W"
    D = "D"

    @classmethod
    def values(cls) -> tuple:
        return tuple(member.value for member in cls)


# Column order of the patients table, shared by every SELECT in the repository
PATIENT_COLUMNS = (
    "id",
    "first_name",
    "last_name",
    "birth_date",
    "gender",
    "street",
    "postal_code",
    "city",
    "phone",
    "email",
    "insurance_number",
    "insurance_provider",
)


@dataclass
class Patient:
    """
    Model representing a patient in the system.

    A patient without an id has not been persisted yet. The id is assigned
    by the store on creation and stays fixed afterwards.
    """

    first_name: str
    last_name: str
    birth_date: Optional[date]
    gender: Optional[str]
    insurance_number: str
    insurance_provider: str
    street: str = ""
    postal_code: str = ""
    city: str = ""
    phone: str = ""
    email: str = ""
    id: Optional[int] = None

    @property
    def is_new(self) -> bool:
        """True until the store has assigned an identifier."""
        return not self.id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_valid_gender(self) -> bool:
        """Gender is present and one of M, W, D."""
        return self.gender in Gender.values()

    def is_valid_birth_date(self, today: Optional[date] = None) -> bool:
        """Birth date is present and not later than today."""
        return self.birth_date is not None and not is_future_date(self.birth_date, today)

    def to_dict(self) -> Dict[str, Any]:
        """Convert patient to dictionary for API responses."""
        data = asdict(self)
        data["birth_date"] = self.birth_date.isoformat() if self.birth_date else None
        return data

    @classmethod
    def from_row(cls, row: tuple) -> "Patient":
        """
        Create a Patient from a database row tuple.

        Args:
            row: Tuple in PATIENT_COLUMNS order.

        Returns:
            Patient instance.
        """
        values = dict(zip(PATIENT_COLUMNS, row))
        values["birth_date"] = from_db_string(values["birth_date"])
        # Optional text columns may be NULL in rows written by other tools
        for name in ("street", "postal_code", "city", "phone", "email"):
            values[name] = values[name] or ""
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Patient":
        """
        Create a Patient from a dictionary, ignoring unknown keys.

        birth_date may be a date or a string in any format
        core.datetime_utils.parse_date accepts.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        birth_date = values.get("birth_date")
        if not isinstance(birth_date, date):
            values["birth_date"] = parse_date_safe(birth_date)
        values.setdefault("gender", None)
        return cls(**values)

    def __str__(self) -> str:
        return f"{self.full_name} (ID: {self.id})"
