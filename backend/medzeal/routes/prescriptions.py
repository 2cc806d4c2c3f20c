"""Prescription routes: write and list per patient."""

from typing import List

from fastapi import APIRouter, Depends

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.common import ErrorResponse
from medzeal.schemas.prescription import Prescription, PrescriptionInput
from medzeal.services.prescription_service import prescription_service

router = APIRouter(prefix="/api/prescriptions", tags=["Prescriptions"])


@router.get("/{patient_id}", response_model=List[Prescription], summary="Prescriptions of a patient, newest first")
async def list_prescriptions(patient_id: str, store: RealtimeStore = Depends(get_store)) -> List[Prescription]:
    return await prescription_service.list_prescriptions(store, patient_id)


@router.post(
    "/{patient_id}",
    status_code=201,
    response_model=Prescription,
    responses={400: {"description": "Form validation failed", "model": ErrorResponse}},
    summary="Write a prescription",
)
async def create_prescription(
    patient_id: str,
    payload: PrescriptionInput,
    store: RealtimeStore = Depends(get_store),
) -> Prescription:
    return await prescription_service.create_prescription(store, patient_id, payload)
