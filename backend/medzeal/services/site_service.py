"""Static content of the public site: weekly doctor schedule and service packages."""

from typing import Dict, List

from medzeal.schemas.site import (
    Availability,
    Doctor,
    PackageFeature,
    ScheduledDoctor,
    ScheduleResponse,
    ServiceOffering,
    ServicePackage,
    ServicesResponse,
    TimeSlot,
)

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
ALTERNATE_DAYS = ["Monday", "Wednesday", "Saturday"]

TIME_SLOTS = [
    TimeSlot(start="10:00 AM", end="1:00 PM"),
    TimeSlot(start="11:30 AM", end="1:30 PM"),
    TimeSlot(start="2:00 PM", end="5:00 PM"),
    TimeSlot(start="5:00 PM", end="8:00 PM"),
    TimeSlot(start="8:00 PM", end="10:00 PM"),
]

DOCTORS = [
    Doctor(
        name="Dr. Saheba",
        specialty="General Practitioner",
        availability=[Availability(days=DAYS, time="11:30 AM - 1:30 PM")],
    ),
    Doctor(
        name="Dr. Shajar",
        specialty="Specialist Surgeon",
        availability=[
            Availability(days=DAYS, time="2:00 PM - 5:00 PM"),
            Availability(days=DAYS, time="8:00 PM - 10:00 PM"),
        ],
    ),
    Doctor(
        name="Dr. Shoeb",
        specialty="Orthopedic Specialist",
        availability=[Availability(days=DAYS, time="5:00 PM - 8:00 PM")],
    ),
    Doctor(
        name="Faiz Ahmed Shaikh",
        specialty="Cardiologist",
        availability=[Availability(days=ALTERNATE_DAYS, time="10:00 AM - 1:00 PM")],
    ),
    Doctor(
        name="Rupa Nandi",
        specialty="Pediatrician",
        availability=[Availability(days=ALTERNATE_DAYS, time="2:00 PM - 5:00 PM")],
    ),
]


def _package(title: str, icon: str, features: List[str]) -> ServicePackage:
    return ServicePackage(title=title, icon=icon, features=[PackageFeature(name=f) for f in features])


PACKAGES = [
    _package("Neuro Physiotherapy", "icofont-therapy", [
        "Personalized treatment plans",
        "Expert neurologist consultations",
        "Advanced rehabilitation techniques",
        "Continuous progress monitoring",
    ]),
    _package("Cardiorespiratory Physiotherapy", "icofont-lungs", [
        "Breathing exercises and techniques",
        "Tailored cardiovascular programs",
        "Post-operative recovery support",
        "Patient education and support",
    ]),
    _package("Sports Therapy", "icofont-sport", [
        "Injury prevention strategies",
        "Rehabilitation for athletes",
        "Customized exercise programs",
        "Performance enhancement techniques",
    ]),
]

OFFERINGS = [
    ServiceOffering(title="Neuro Physiotherapy", icon="icofont-therapy",
                    description="Expert care for neurological conditions, enhancing mobility and quality of life."),
    ServiceOffering(title="Cardiorespiratory Physiotherapy", icon="icofont-lungs",
                    description="Focused treatments for respiratory and cardiac health."),
    ServiceOffering(title="Sports Therapy", icon="icofont-sport",
                    description="Rehabilitation and injury prevention for athletes of all levels."),
    ServiceOffering(title="Speech Therapy", icon="icofont-speech",
                    description="Improving communication skills for better quality of life."),
    ServiceOffering(title="Paediatric Physiotherapy", icon="icofont-child",
                    description="Specialized physiotherapy for children to aid their development."),
    ServiceOffering(title="Maternal Physiotherapy", icon="icofont-wbaby",
                    description="Supporting mothers with tailored therapies for pregnancy and postpartum recovery."),
    ServiceOffering(title="Massage Therapy", icon="icofont-massage",
                    description="Therapeutic massage to promote relaxation and well-being."),
    ServiceOffering(title="Yoga", icon="icofont-yoga",
                    description="Guided sessions to enhance flexibility and mindfulness."),
    ServiceOffering(title="Acupuncture", icon="icofont-acupuncture",
                    description="Holistic treatment for pain relief and health improvement."),
]


def doctors_for_slot(day: str, slot: TimeSlot) -> List[ScheduledDoctor]:
    return [
        ScheduledDoctor(name=doctor.name, specialty=doctor.specialty)
        for doctor in DOCTORS
        if any(day in a.days and a.time == slot.label for a in doctor.availability)
    ]


def build_schedule() -> ScheduleResponse:
    grid: Dict[str, Dict[str, List[ScheduledDoctor]]] = {
        day: {slot.label: doctors_for_slot(day, slot) for slot in TIME_SLOTS}
        for day in DAYS
    }
    return ScheduleResponse(days=DAYS, time_slots=TIME_SLOTS, doctors=DOCTORS, grid=grid)


def list_services() -> ServicesResponse:
    return ServicesResponse(packages=PACKAGES, offerings=OFFERINGS)
