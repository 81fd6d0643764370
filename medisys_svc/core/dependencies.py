"""
FastAPI Dependency Injection configuration for the MediSys service.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (PatientService)
         ↓ Injected
    Repository Layer (PatientRepository)
         ↓ Injected
    Database handle (opened in main.lifespan, kept on app.state)

The Database handle is created once by the application lifespan and
stored on app.state; nothing here keeps module-level state.

Usage in Routers:
    from core.dependencies import get_patient_service

    @router.get("/patients")
    async def list_patients(service: PatientService = Depends(get_patient_service)):
        return service.get_patients()

Testing:
    app.dependency_overrides[get_database] = lambda: test_database
"""
import logging

from fastapi import Depends, Request

from core.exceptions import DatabaseConnectionError
from repositories import Database, PatientRepository
from services import PatientService

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    """
    Get the application's database handle.

    Raises:
        DatabaseConnectionError: If the lifespan did not open a handle.
    """
    db = getattr(request.app.state, "database", None)
    if db is None:
        logger.error("No database handle on app.state")
        raise DatabaseConnectionError()
    return db


def get_patient_repository(db: Database = Depends(get_database)) -> PatientRepository:
    """PatientRepository bound to the application's database handle."""
    return PatientRepository(db=db)


def get_patient_service(
    patient_repo: PatientRepository = Depends(get_patient_repository),
) -> PatientService:
    """PatientService with its repository injected."""
    return PatientService(patient_repository=patient_repo)
