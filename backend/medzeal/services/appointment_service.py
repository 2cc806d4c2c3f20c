"""
MedZeal Backend: Appointment Service
=====================================

What:  Flattened appointment listing with the admin pages' filters, approval,
       attendance, the bin (soft delete and restore) and removal.
How:   Reads go through the appointments live snapshot; every status change is
       a single merge into appointments/{uid}/{id}.

Filters (all optional, combined with AND):
    approved / attended   match the boolean flag (a missing flag is False)
    deleted               False hides soft-deleted entries (default),
                          True shows only those, None shows both
    date                  exact appointmentDate (YYYY-MM-DD)
    month / year          the month ("01".."12") or year part of appointmentDate
    search                substring of doctor, message, name, product description
                          (case-insensitive) or phone
"""

import logging
import math
from typing import Any, List, Optional

from medzeal.exceptions import NotFoundError, StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.clinic import AppointmentApproval, AttendanceUpdate, BinMarker
from medzeal.schemas.appointment import Appointment, ApprovalInput, AttendanceInput, BinInput
from medzeal.services.subscriptions import fetch, live_snapshots
from medzeal.services.tree import as_dict, number, text

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("Cash", "Online")
ATTEND_FAILED_MESSAGE = "Failed to update appointment."


def _optional_number(value: Any):
    return None if value is None else number(value)


def flatten_appointments(tree: Any) -> List[Appointment]:
    appointments = []
    for uid, group in as_dict(tree).items():
        for appointment_id, raw in as_dict(group).items():
            raw = as_dict(raw)
            appointments.append(
                Appointment(
                    id=appointment_id,
                    user_id=uid,
                    name=text(raw.get("name")),
                    email=text(raw.get("email")),
                    phone=text(raw.get("phone")),
                    doctor=text(raw.get("doctor")),
                    appointment_date=text(raw.get("appointmentDate")),
                    appointment_time=text(raw.get("appointmentTime")),
                    message=text(raw.get("message")),
                    approved=bool(raw.get("approved")),
                    attended=bool(raw.get("attended")),
                    deleted=bool(raw.get("deleted")),
                    payment_method=raw.get("paymentMethod"),
                    price=_optional_number(raw.get("price")),
                    consultant_amount=_optional_number(raw.get("consultantAmount")),
                    product_amount=_optional_number(raw.get("productAmount")),
                    product_description=raw.get("productDescription"),
                )
            )
    return appointments


def filter_appointments(
    appointments: List[Appointment],
    approved: Optional[bool] = None,
    attended: Optional[bool] = None,
    deleted: Optional[bool] = False,
    date: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Appointment]:
    needle = (search or "").strip().lower()
    month = month.zfill(2) if month else None

    def matches(a: Appointment) -> bool:
        if approved is not None and a.approved != approved:
            return False
        if attended is not None and a.attended != attended:
            return False
        if deleted is not None and a.deleted != deleted:
            return False
        if date and a.appointment_date != date:
            return False
        parts = a.appointment_date.split("-")
        if month and (len(parts) < 2 or parts[1] != month):
            return False
        if year and parts[0] != year:
            return False
        if needle:
            haystack = (a.doctor, a.message, a.name, a.phone, a.product_description or "")
            return any(needle in field.lower() for field in haystack)
        return True

    return [a for a in appointments if matches(a)]


class AppointmentService:
    async def list_appointments(self, store, **filters) -> List[Appointment]:
        """See module docstring for the accepted filters."""
        tree = await live_snapshots.appointments.current(store)
        return filter_appointments(flatten_appointments(tree), **filters)

    async def _require(self, store, uid: str, appointment_id: str) -> str:
        path = paths.appointment_path(uid, appointment_id)
        if not await fetch(store, path):
            raise NotFoundError(resource="Appointment", resource_id=appointment_id)
        return path

    async def approve(self, store, uid: str, appointment_id: str, payload: ApprovalInput) -> AppointmentApproval:
        """
        Mark approved and record the payment.

        `price` defaults to 0; consultant amount is written only when given;
        product amount (default 0) and description only when `add_product` is set.

        Raises:
            ValidationError: no payment method (nothing written)
            NotFoundError: the appointment does not exist
            StoreError: the update failed
        """
        if not payload.payment_method.strip():
            raise ValidationError(message="Payment method is required.", field="paymentMethod")

        path = await self._require(store, uid, appointment_id)
        approval = AppointmentApproval(
            payment_method=payload.payment_method.strip(),
            price=payload.price or 0,
            consultant_amount=payload.consultant_amount or None,
        )
        if payload.add_product:
            approval.product_amount = payload.product_amount or 0
            approval.product_description = payload.product_description or None

        try:
            await store.update(path, approval.to_document())
        except Exception as e:
            logger.error("Approving %s failed: %s", path, e, exc_info=True)
            raise StoreError(message="Error approving appointment.", context={"path": path})

        live_snapshots.appointments.apply_local(f"{uid}/{appointment_id}", approval.to_document())
        logger.info("Appointment %s approved (%s)", path, approval.payment_method)
        return approval

    async def _merge(self, store, uid: str, appointment_id: str, values: dict, failure_message: str) -> None:
        path = await self._require(store, uid, appointment_id)
        try:
            await store.update(path, values)
        except Exception as e:
            logger.error("Updating %s failed: %s", path, e, exc_info=True)
            raise StoreError(message=failure_message, context={"path": path})
        live_snapshots.appointments.apply_local(f"{uid}/{appointment_id}", values)

    async def mark_attended(self, store, uid: str, appointment_id: str, payload: AttendanceInput) -> AttendanceUpdate:
        """
        Set or clear `attended`. Marking attended also records price and payment method.

        Raises:
            ValidationError: missing or negative price, or an unknown payment method
            NotFoundError: the appointment does not exist
            StoreError: the update failed
        """
        update = AttendanceUpdate(attended=payload.attended)
        if payload.attended:
            if payload.price is None:
                raise ValidationError(message="Price cannot be empty.", field="price")
            if not math.isfinite(payload.price) or payload.price < 0:
                raise ValidationError(
                    message="Please enter a valid positive number for the price.", field="price"
                )
            if payload.payment_method not in PAYMENT_METHODS:
                raise ValidationError(message="Invalid payment method selected.", field="paymentMethod")
            update.price = payload.price
            update.payment_method = payload.payment_method

        await self._merge(store, uid, appointment_id, update.to_document(), ATTEND_FAILED_MESSAGE)
        logger.info("Appointment %s/%s attended=%s", uid, appointment_id, update.attended)
        return update

    async def move_to_bin(self, store, uid: str, appointment_id: str, payload: BinInput) -> BinMarker:
        """Soft delete: hidden from the default listing, kept for the bin page."""
        marker = BinMarker(deleted_by=payload.deleted_by.strip() or None)
        await self._merge(store, uid, appointment_id, marker.to_document(), "Failed to move the appointment to the bin.")
        logger.info("Appointment %s/%s moved to the bin by %s", uid, appointment_id, marker.deleted_by or "unknown")
        return marker

    async def restore(self, store, uid: str, appointment_id: str) -> BinMarker:
        marker = BinMarker.restored()
        await self._merge(store, uid, appointment_id, marker.to_document(), "Failed to restore the appointment.")
        logger.info("Appointment %s/%s restored from the bin", uid, appointment_id)
        return marker

    async def remove(self, store, uid: str, appointment_id: str) -> None:
        path = paths.appointment_path(uid, appointment_id)
        try:
            await store.delete(path)
        except Exception as e:
            logger.error("Deleting %s failed: %s", path, e, exc_info=True)
            raise StoreError(message="Failed to delete the appointment.", context={"path": path})

        live_snapshots.appointments.apply_local(uid, {appointment_id: None})
        logger.info("Appointment %s deleted", path)


appointment_service = AppointmentService()
