"""
Repository for patient database operations.

This module contains all database access for patient-related operations.

Architecture:
    PatientRepository is the data access layer for patients.
    It should be injected via core.dependencies.get_patient_repository().

All SQL is encapsulated in this repository - no SQL in service, controller
or API layers. Driver errors leave this module as BackendError.
"""
import sqlite3
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from core.datetime_utils import to_db_string
from core.exceptions import BackendError
from models.patient import Patient, PATIENT_COLUMNS
from repositories.base import Database

logger = logging.getLogger(__name__)

_SELECT = f"SELECT {', '.join(PATIENT_COLUMNS)} FROM patients"
_ORDER = "ORDER BY last_name ASC, first_name ASC, id ASC"

# Relations whose rows reference patients.id
DEPENDENT_TABLES = ("appointments", "invoices")


def _like_pattern(term: str) -> str:
    """Build a LIKE pattern matching term literally anywhere in a column."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PatientRepository:
    """
    Repository for patient CRUD operations.

    This repository encapsulates all database operations for patients.
    It should be instantiated via core.dependencies.get_patient_repository().
    """

    def __init__(self, db: Database):
        """
        Initialize the patient repository.

        Args:
            db: Database handle for data access.
        """
        self._db = db

    @contextmanager
    def _cursor(self, operation: str) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction; commit on success, roll back on error."""
        conn = self._db.connection
        try:
            with conn:
                yield conn.cursor()
        except sqlite3.Error as e:
            logger.error(f"Database error during {operation}: {e}")
            raise BackendError(detail=str(e), operation=operation) from e

    @staticmethod
    def _field_values(patient: Patient) -> tuple:
        return (
            patient.first_name,
            patient.last_name,
            to_db_string(patient.birth_date),
            patient.gender,
            patient.street,
            patient.postal_code,
            patient.city,
            patient.phone,
            patient.email,
            patient.insurance_number,
            patient.insurance_provider,
        )

    def insert(self, patient: Patient) -> bool:
        """
        Insert a new patient and set the generated id on it.

        Args:
            patient: Patient to insert. Its id is ignored and overwritten.

        Returns:
            bool: True if a row was written.
        """
        with self._cursor("insert") as cursor:
            cursor.execute("""
                INSERT INTO patients (
                    first_name, last_name, birth_date, gender,
                    street, postal_code, city, phone, email,
                    insurance_number, insurance_provider
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, self._field_values(patient))

            if cursor.rowcount <= 0:
                return False
            patient.id = cursor.lastrowid
            return True

    def get_all(self) -> List[Patient]:
        """
        Get all patients, sorted by last name then first name.

        Returns:
            List[Patient]: Every stored patient.
        """
        with self._cursor("get_all") as cursor:
            cursor.execute(f"{_SELECT} {_ORDER}")
            rows = cursor.fetchall()
        return [Patient.from_row(row) for row in rows]

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        """
        Get a patient by id.

        Returns:
            Optional[Patient]: The patient or None if not found.
        """
        with self._cursor("get_by_id") as cursor:
            cursor.execute(f"{_SELECT} WHERE id = ?", (patient_id,))
            row = cursor.fetchone()
        return Patient.from_row(row) if row else None

    def search(self, term: str) -> List[Patient]:
        """
        Find patients whose first name, last name, insurance number or
        email contains term.

        Matching follows SQLite LIKE (case-insensitive for ASCII).
        Results are ordered like get_all().
        """
        pattern = _like_pattern(term)
        with self._cursor("search") as cursor:
            cursor.execute(f"""
                {_SELECT}
                WHERE first_name LIKE ? ESCAPE '\\'
                   OR last_name LIKE ? ESCAPE '\\'
                   OR insurance_number LIKE ? ESCAPE '\\'
                   OR email LIKE ? ESCAPE '\\'
                {_ORDER}
            """, (pattern, pattern, pattern, pattern))
            rows = cursor.fetchall()
        return [Patient.from_row(row) for row in rows]

    def update(self, patient: Patient) -> bool:
        """
        Replace all mutable fields of an existing patient.

        Returns:
            bool: False if no row has patient.id.
        """
        with self._cursor("update") as cursor:
            cursor.execute("""
                UPDATE patients SET
                    first_name = ?, last_name = ?, birth_date = ?, gender = ?,
                    street = ?, postal_code = ?, city = ?, phone = ?, email = ?,
                    insurance_number = ?, insurance_provider = ?
                WHERE id = ?
            """, self._field_values(patient) + (patient.id,))
            return cursor.rowcount > 0

    def delete(self, patient_id: int) -> bool:
        """
        Delete a patient row.

        Returns:
            bool: True if a row was removed.
        """
        with self._cursor("delete") as cursor:
            cursor.execute("DELETE FROM patients WHERE id = ?", (patient_id,))
            return cursor.rowcount > 0

    def count_dependents(self, patient_id: int) -> Dict[str, int]:
        """
        Count rows in dependent relations that reference a patient.

        Returns:
            Dict[str, int]: Row count per dependent table.
        """
        query = " UNION ALL ".join(
            f"SELECT '{table}', COUNT(*) FROM {table} WHERE patient_id = ?"
            for table in DEPENDENT_TABLES
        )
        with self._cursor("count_dependents") as cursor:
            cursor.execute(query, (patient_id,) * len(DEPENDENT_TABLES))
            rows = cursor.fetchall()
        return {table: count for table, count in rows}
