"""Public site content routes."""

from fastapi import APIRouter

from medzeal.schemas.site import ScheduleResponse, ServicesResponse
from medzeal.services.site_service import build_schedule, list_services

router = APIRouter(prefix="/api/site", tags=["Site"])


@router.get("/schedule", response_model=ScheduleResponse, summary="Weekly doctor schedule")
async def schedule() -> ScheduleResponse:
    return build_schedule()


@router.get("/services", response_model=ServicesResponse, summary="Service packages")
async def services() -> ServicesResponse:
    return list_services()
