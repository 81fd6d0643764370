"""
Patients router - patient management endpoints.

Architecture:
    HTTP Request → Router (this file) → PatientService → PatientRepository → Database

Domain errors raised by the service (ValidationError, PatientNotFoundError,
ReferentialIntegrityError, BackendError) are turned into JSON responses
by the handlers registered in core.exceptions.setup_exception_handlers().
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from core.dependencies import get_patient_service
from core.exceptions import PatientNotFoundError
from schemas import PatientCreate, PatientResponse, PatientUpdate
from services import PatientService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/patients",
    tags=["Patients"],
)


@router.post(
    "",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new patient",
    description="Admit a new patient. The birth date must not be in the future "
                "and the gender must be M, W or D. Returns the patient with its assigned ID."
)
async def create_patient(
    patient: PatientCreate,
    patient_service: PatientService = Depends(get_patient_service)
):
    """
    Create a new patient.

    Returns 422 with every violated rule if the record is invalid.
    """
    return patient_service.create_patient(patient.to_patient())


@router.get(
    "",
    response_model=List[PatientResponse],
    summary="List or search patients",
    description="Retrieve patients sorted by last name, then first name. With `q`, only patients "
                "whose first name, last name, insurance number or email contain `q` are returned."
)
async def list_patients(
    q: Optional[str] = Query(
        None,
        max_length=100,
        description="Substring to search for. Empty or missing returns all patients.",
        examples=["Muster"]
    ),
    patient_service: PatientService = Depends(get_patient_service)
):
    term = (q or "").strip()
    if not term:
        return patient_service.get_patients()
    return patient_service.search_patients(term)


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Get a patient",
)
async def get_patient(
    patient_id: int,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Returns 404 if no patient has this ID."""
    return patient_service.get_patient(patient_id)


@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Update a patient",
    description="Replace all fields of an existing patient. The ID never changes."
)
async def update_patient(
    patient_id: int,
    patient: PatientUpdate,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Returns 404 for an unknown ID, including IDs the store never assigns."""
    record = patient.to_patient(patient_id)
    if record.is_new:
        raise PatientNotFoundError(patient_id=patient_id)
    return patient_service.update_patient(record)


@router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a patient",
    description="Delete a patient without appointments or invoices. "
                "Returns 409 if dependent records exist, 404 if the patient does not exist."
)
async def delete_patient(
    patient_id: int,
    patient_service: PatientService = Depends(get_patient_service)
):
    if not patient_service.delete_patient(patient_id):
        raise PatientNotFoundError(patient_id=patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
