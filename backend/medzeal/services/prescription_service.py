"""
MedZeal Backend: Prescription Service
======================================

What:  Writes and lists prescriptions under prescriptions/{patientId}.
Rules: symptoms required; at least one medicine; each medicine needs a name
       and a consumption period. Dose times and instructions are optional.
"""

import logging
from typing import Dict, List

from medzeal.exceptions import StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.clinic import DoseTimes, MedicineDocument, PrescriptionDocument
from medzeal.schemas.prescription import MedicineInput, Prescription, PrescriptionInput
from medzeal.services.subscriptions import fetch
from medzeal.services.tree import as_dict, text

logger = logging.getLogger(__name__)


def validate_prescription(payload: PrescriptionInput) -> None:
    errors: Dict[str, str] = {}
    if not payload.symptoms.strip():
        errors["symptoms"] = "Symptoms are required."
    if not payload.medicines:
        errors["medicines"] = "Add at least one medicine."
    for index, medicine in enumerate(payload.medicines):
        if not medicine.name.strip():
            errors[f"medicines[{index}].name"] = "Medicine name is required."
        if not medicine.consumption.strip():
            errors[f"medicines[{index}].consumption"] = "Consumption days are required."
    if errors:
        first_field = next(iter(errors))
        raise ValidationError(message=errors[first_field], field=first_field, context={"errors": errors})


class PrescriptionService:
    async def create_prescription(self, store, patient_id: str, payload: PrescriptionInput) -> Prescription:
        validate_prescription(payload)
        document = PrescriptionDocument(
            patient_id=patient_id,
            symptoms=payload.symptoms.strip(),
            medicines=[
                MedicineDocument(
                    name=m.name.strip(),
                    consumption=m.consumption.strip(),
                    times=DoseTimes(**m.times.model_dump()),
                    instruction=m.instruction.strip(),
                )
                for m in payload.medicines
            ],
            overall_instruction=payload.overall_instruction.strip(),
        )
        try:
            prescription_id = await store.push(
                paths.patient_prescriptions_path(patient_id), document.to_document()
            )
        except Exception as e:
            logger.error("Saving prescription for %s failed: %s", patient_id, e, exc_info=True)
            raise StoreError(message="Failed to save prescription. Please try again.")

        logger.info("Prescription %s saved for patient %s", prescription_id, patient_id)
        return Prescription(
            id=prescription_id,
            patient_id=patient_id,
            symptoms=document.symptoms,
            medicines=payload.medicines,
            overall_instruction=document.overall_instruction,
            date=document.date,
        )

    async def list_prescriptions(self, store, patient_id: str) -> List[Prescription]:
        """Newest first."""
        tree = await fetch(store, paths.patient_prescriptions_path(patient_id))
        prescriptions = []
        for prescription_id, raw in as_dict(tree).items():
            raw = as_dict(raw)
            prescriptions.append(
                Prescription(
                    id=prescription_id,
                    patient_id=text(raw.get("patientId")) or patient_id,
                    symptoms=text(raw.get("symptoms")),
                    medicines=[
                        MedicineInput.model_validate(as_dict(m))
                        for m in as_dict(raw.get("medicines")).values()
                    ],
                    overall_instruction=text(raw.get("overallInstruction")),
                    date=text(raw.get("date")),
                )
            )
        prescriptions.sort(key=lambda p: p.date, reverse=True)
        return prescriptions


prescription_service = PrescriptionService()
