"""Appointment routes: filtered listing, approval, attendance, bin and removal."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.appointment import Appointment, ApprovalInput, AttendanceInput, BinInput
from medzeal.schemas.common import ErrorResponse, MessageResponse
from medzeal.services.appointment_service import appointment_service

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])

DELETED_FILTERS = {"false": False, "true": True, "all": None}

_WRITE_ERRORS = {
    404: {"description": "Appointment not found", "model": ErrorResponse},
    500: {"description": "The update failed", "model": ErrorResponse},
}


@router.get("", response_model=List[Appointment], summary="List appointments")
async def list_appointments(
    approved: Optional[bool] = Query(default=None),
    attended: Optional[bool] = Query(default=None),
    deleted: Literal["false", "true", "all"] = Query(
        default="false", description="true lists only the bin, all lists both"
    ),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    month: Optional[str] = Query(default=None, description="01-12"),
    year: Optional[str] = Query(default=None, description="YYYY"),
    q: Optional[str] = Query(default=None, description="Search doctor, message, name, phone, product"),
    store: RealtimeStore = Depends(get_store),
) -> List[Appointment]:
    return await appointment_service.list_appointments(
        store,
        approved=approved,
        attended=attended,
        deleted=DELETED_FILTERS[deleted],
        date=date,
        month=month,
        year=year,
        search=q,
    )


@router.post(
    "/{uid}/{appointment_id}/approve",
    response_model=MessageResponse,
    responses={
        400: {"description": "Payment method is required.", "model": ErrorResponse},
        404: {"description": "Appointment not found", "model": ErrorResponse},
        500: {"description": "Error approving appointment.", "model": ErrorResponse},
    },
    summary="Approve an appointment",
)
async def approve_appointment(
    uid: str,
    appointment_id: str,
    payload: ApprovalInput,
    store: RealtimeStore = Depends(get_store),
) -> MessageResponse:
    await appointment_service.approve(store, uid, appointment_id, payload)
    return MessageResponse(message="Appointment approved successfully.", id=appointment_id)


@router.post(
    "/{uid}/{appointment_id}/attend",
    response_model=MessageResponse,
    responses={400: {"description": "Invalid price or payment method", "model": ErrorResponse}, **_WRITE_ERRORS},
    summary="Mark an appointment attended or not attended",
)
async def attend_appointment(
    uid: str,
    appointment_id: str,
    payload: AttendanceInput,
    store: RealtimeStore = Depends(get_store),
) -> MessageResponse:
    await appointment_service.mark_attended(store, uid, appointment_id, payload)
    return MessageResponse(message="Appointment updated successfully.", id=appointment_id)


@router.post(
    "/{uid}/{appointment_id}/bin",
    response_model=MessageResponse,
    responses=_WRITE_ERRORS,
    summary="Move an appointment to the bin",
)
async def bin_appointment(
    uid: str,
    appointment_id: str,
    payload: Optional[BinInput] = None,
    store: RealtimeStore = Depends(get_store),
) -> MessageResponse:
    await appointment_service.move_to_bin(store, uid, appointment_id, payload or BinInput())
    return MessageResponse(message="Appointment moved to bin.", id=appointment_id)


@router.post(
    "/{uid}/{appointment_id}/restore",
    response_model=MessageResponse,
    responses=_WRITE_ERRORS,
    summary="Restore an appointment from the bin",
)
async def restore_appointment(
    uid: str,
    appointment_id: str,
    store: RealtimeStore = Depends(get_store),
) -> MessageResponse:
    await appointment_service.restore(store, uid, appointment_id)
    return MessageResponse(message="Appointment restored.", id=appointment_id)


@router.delete("/{uid}/{appointment_id}", response_model=MessageResponse, summary="Delete an appointment")
async def delete_appointment(
    uid: str,
    appointment_id: str,
    store: RealtimeStore = Depends(get_store),
) -> MessageResponse:
    await appointment_service.remove(store, uid, appointment_id)
    return MessageResponse(message="Appointment deleted successfully.", id=appointment_id)
