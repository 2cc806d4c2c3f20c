"""Public site content schemas."""

from typing import Dict, List

from pydantic import BaseModel


class TimeSlot(BaseModel):
    start: str
    end: str

    @property
    def label(self) -> str:
        return f"{self.start} - {self.end}"


class Availability(BaseModel):
    days: List[str]
    time: str


class Doctor(BaseModel):
    name: str
    specialty: str
    availability: List[Availability]


class ScheduledDoctor(BaseModel):
    name: str
    specialty: str


class ScheduleResponse(BaseModel):
    """`grid[day][slot label]` lists the doctors available in that slot."""
    days: List[str]
    time_slots: List[TimeSlot]
    doctors: List[Doctor]
    grid: Dict[str, Dict[str, List[ScheduledDoctor]]]


class PackageFeature(BaseModel):
    name: str
    included: bool = True


class ServicePackage(BaseModel):
    title: str
    icon: str
    features: List[PackageFeature]


class ServiceOffering(BaseModel):
    title: str
    icon: str
    description: str


class ServicesResponse(BaseModel):
    packages: List[ServicePackage]
    offerings: List[ServiceOffering]
