"""
Shared pytest fixtures.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: app.dependency_overrides injects the test database handle
3. Service Injection: Services are created with test repositories

Fixture Hierarchy:
    temp_db → patient_repo → patient_service → controller
                                             → test_app → client
"""
import os
import tempfile
from datetime import date
from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from repositories import Database, PatientRepository
from services import PatientService
from controllers import PatientController
from core.exceptions import setup_exception_handlers
from core import dependencies as deps
from models.patient import Patient

# Fixed "today" so birth date tests do not depend on the calendar
TODAY = date(2026, 10, 18)


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    The handle is opened before the test and closed afterwards.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    db.open()
    yield db

    db.close()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def patient_repo(temp_db):
    """Create a PatientRepository with the test database."""
    return PatientRepository(db=temp_db)


@pytest.fixture
def patient_service(patient_repo):
    """Create a PatientService with the test repository and a fixed clock."""
    return PatientService(patient_repository=patient_repo, clock=lambda: TODAY)


@pytest.fixture
def confirmations():
    """Answers handed to the controller's delete confirmation, consumed in order."""
    return []


@pytest.fixture
def controller(patient_service, temp_db, confirmations):
    """PatientController whose confirmation answers come from `confirmations` (default: yes)."""
    def confirm(patient):
        return confirmations.pop(0) if confirmations else True

    ctrl = PatientController(patient_service, confirm_delete=confirm, database=temp_db)
    ctrl.initialize()
    return ctrl


@pytest.fixture
def make_patient() -> Callable[..., Patient]:
    """Build a valid, unsaved Patient; keyword arguments override fields."""
    def _make(**overrides: Any) -> Patient:
        values = dict(
            first_name="Anna",
            last_name="Muster",
            birth_date=date(1990, 5, 1),
            gender="W",
            insurance_number="756.1234",
            insurance_provider="CSS",
            street="Bahnhofstrasse 1",
            postal_code="3000",
            city="Bern",
            phone="031 123 45 67",
            email="anna.muster@example.ch",
        )
        values.update(overrides)
        return Patient(**values)
    return _make


@pytest.fixture
def add_appointment(temp_db):
    """Insert an appointment row referencing a patient."""
    def _add(patient_id: int) -> None:
        with temp_db.connection as conn:
            conn.execute(
                "INSERT INTO appointments (patient_id, starts_at, reason) VALUES (?, ?, ?)",
                (patient_id, "2026-11-02T09:30:00", "Check-up"),
            )
    return _add


@pytest.fixture
def add_invoice(temp_db):
    """Insert an invoice row referencing a patient."""
    def _add(patient_id: int) -> None:
        with temp_db.connection as conn:
            conn.execute(
                "INSERT INTO invoices (patient_id, issued_on, amount_cents) VALUES (?, ?, ?)",
                (patient_id, "2026-10-01", 12000),
            )
    return _add


@pytest.fixture
def test_app(temp_db):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers and exception handlers; only the database
    handle is replaced by the test database.
    """
    from api.routers import health_router, patients_router

    app = FastAPI(title="MediSys Patient Service Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db

    app.include_router(health_router)
    app.include_router(patients_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


@pytest.fixture
def anna_payload():
    """Request body for the reference patient."""
    return {
        "first_name": "Anna",
        "last_name": "Muster",
        "birth_date": "1990-05-01",
        "gender": "W",
        "insurance_number": "756.1234",
        "insurance_provider": "CSS",
    }
