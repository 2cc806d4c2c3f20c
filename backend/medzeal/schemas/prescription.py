"""Prescription schemas (prescriptions/{patientId}/*)."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _Input(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DoseTimesInput(_Input):
    morning: bool = False
    evening: bool = False
    night: bool = False


class MedicineInput(_Input):
    name: str = ""
    consumption: str = Field(default="", description="How long to take it, e.g. '5 days'")
    times: DoseTimesInput = Field(default_factory=DoseTimesInput)
    instruction: str = ""


class PrescriptionInput(_Input):
    symptoms: str = ""
    medicines: List[MedicineInput] = Field(default_factory=list)
    overall_instruction: str = Field(default="", alias="overallInstruction")


class Prescription(BaseModel):
    id: str
    patient_id: str
    symptoms: str
    medicines: List[MedicineInput]
    overall_instruction: str = ""
    date: str = ""
