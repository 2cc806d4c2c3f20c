"""
MedZeal Backend: Appointment and User Service Tests
====================================================

Covers flattening and filtering of per-user appointments, approval, attendance,
the bin, removal and the user directory lookups.
"""

from types import SimpleNamespace

import pytest

from medzeal.exceptions import NotFoundError, StoreError, ValidationError
from medzeal.schemas.appointment import ApprovalInput, AttendanceInput, BinInput
from medzeal.services.appointment_service import (
    ATTEND_FAILED_MESSAGE,
    AppointmentService,
    filter_appointments,
    flatten_appointments,
)
from medzeal.services.subscriptions import live_snapshots
from medzeal.services.user_service import UserService, search_users


class TestFiltering:
    """Listing filters combined with AND."""

    def test_flatten_carries_user_id(self, appointments_tree):
        appointments = {a.id: a for a in flatten_appointments(appointments_tree)}

        assert appointments["a1"].user_id == "uid1"
        assert appointments["a3"].user_id == "uid2"
        assert appointments["a2"].price == 500

    def test_deleted_hidden_by_default(self, appointments_tree):
        ids = {a.id for a in filter_appointments(flatten_appointments(appointments_tree))}

        assert ids == {"a1", "a2"}

    def test_deleted_only_and_both(self, appointments_tree):
        flat = flatten_appointments(appointments_tree)

        assert [a.id for a in filter_appointments(flat, deleted=True)] == ["a3"]
        assert len(filter_appointments(flat, deleted=None)) == 3

    def test_flags(self, appointments_tree):
        flat = flatten_appointments(appointments_tree)

        assert [a.id for a in filter_appointments(flat, approved=False)] == ["a1"]
        assert [a.id for a in filter_appointments(flat, attended=True)] == ["a2"]

    def test_date_month_year(self, appointments_tree):
        flat = flatten_appointments(appointments_tree)

        assert [a.id for a in filter_appointments(flat, date="2024-01-15")] == ["a1"]
        assert [a.id for a in filter_appointments(flat, month="2")] == ["a2"]
        assert [a.id for a in filter_appointments(flat, year="2023", deleted=None)] == ["a3"]

    def test_search(self, appointments_tree):
        flat = flatten_appointments(appointments_tree)

        assert [a.id for a in filter_appointments(flat, search="FOLLOW")] == ["a2"]
        assert {a.id for a in filter_appointments(flat, search="9000000001")} == {"a1", "a2"}
        assert filter_appointments(flat, search="nobody") == []


class TestAppointmentService:

    @pytest.fixture
    def service(self):
        return AppointmentService()

    @pytest.mark.asyncio
    async def test_list_reads_appointments(self, service, mock_store, appointments_tree):
        mock_store.get.return_value = appointments_tree

        appointments = await service.list_appointments(mock_store, approved=True)

        mock_store.get.assert_awaited_once_with("appointments")
        assert [a.id for a in appointments] == ["a2"]

    @pytest.mark.asyncio
    async def test_approve_writes_only_given_fields(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}

        await service.approve(mock_store, "uid1", "a1", ApprovalInput(payment_method="UPI", price=600))

        path, values = mock_store.update.await_args.args
        assert path == "appointments/uid1/a1"
        assert values == {"approved": True, "paymentMethod": "UPI", "price": 600}

    @pytest.mark.asyncio
    async def test_approve_with_product(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}
        payload = ApprovalInput.model_validate({
            "paymentMethod": "Cash",
            "consultantAmount": 200,
            "addProduct": True,
            "productDescription": "Knee brace",
        })

        await service.approve(mock_store, "uid1", "a1", payload)

        values = mock_store.update.await_args.args[1]
        assert values["price"] == 0
        assert values["consultantAmount"] == 200
        assert values["productAmount"] == 0
        assert values["productDescription"] == "Knee brace"

    @pytest.mark.asyncio
    async def test_approve_requires_payment_method(self, service, mock_store):
        with pytest.raises(ValidationError) as exc_info:
            await service.approve(mock_store, "uid1", "a1", ApprovalInput(price=100))

        assert exc_info.value.message == "Payment method is required."
        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_approve_missing_appointment(self, service, mock_store):
        mock_store.get.return_value = None

        with pytest.raises(NotFoundError):
            await service.approve(mock_store, "uid1", "zz", ApprovalInput(payment_method="Cash"))

    @pytest.mark.asyncio
    async def test_approve_failure(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}
        mock_store.update.side_effect = PermissionError("denied")

        with pytest.raises(StoreError) as exc_info:
            await service.approve(mock_store, "uid1", "a1", ApprovalInput(payment_method="Cash"))

        assert exc_info.value.message == "Error approving appointment."

    @pytest.mark.asyncio
    async def test_mark_attended_records_payment(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}
        payload = AttendanceInput.model_validate({"attended": True, "price": 450, "paymentMethod": "Online"})

        await service.mark_attended(mock_store, "uid1", "a1", payload)

        mock_store.update.assert_awaited_once_with(
            "appointments/uid1/a1", {"attended": True, "price": 450, "paymentMethod": "Online"}
        )

    @pytest.mark.asyncio
    async def test_unmark_attended_writes_flag_only(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}

        await service.mark_attended(mock_store, "uid1", "a2", AttendanceInput(attended=False))

        mock_store.update.assert_awaited_once_with("appointments/uid1/a2", {"attended": False})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price, method, message", [
        (None, "Cash", "Price cannot be empty."),
        (-1, "Cash", "Please enter a valid positive number for the price."),
        (100, "Cheque", "Invalid payment method selected."),
    ])
    async def test_mark_attended_validation(self, service, mock_store, price, method, message):
        payload = AttendanceInput(attended=True, price=price, payment_method=method)

        with pytest.raises(ValidationError) as exc_info:
            await service.mark_attended(mock_store, "uid1", "a1", payload)

        assert exc_info.value.message == message
        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mark_attended_failure(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}
        mock_store.update.side_effect = ConnectionError("offline")

        with pytest.raises(StoreError) as exc_info:
            await service.mark_attended(mock_store, "uid1", "a1", AttendanceInput(price=100))

        assert exc_info.value.message == ATTEND_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_move_to_bin(self, service, mock_store):
        mock_store.get.return_value = {"name": "Asha Khan"}

        await service.move_to_bin(mock_store, "uid1", "a1", BinInput(deleted_by="admin@example.com"))

        path, values = mock_store.update.await_args.args
        assert path == "appointments/uid1/a1"
        assert values["deleted"] is True
        assert values["deletedBy"] == "admin@example.com"
        assert values["deletedAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_bin_then_restore_moves_between_listings(self, service, mock_store, appointments_tree):
        live_snapshots.appointments._on_event(SimpleNamespace(event_type="put", path="/", data=appointments_tree))
        mock_store.get.return_value = {"name": "Asha Khan"}

        await service.move_to_bin(mock_store, "uid1", "a1", BinInput())
        assert {a.id for a in await service.list_appointments(mock_store)} == {"a2"}
        assert {a.id for a in await service.list_appointments(mock_store, deleted=True)} == {"a1", "a3"}

        await service.restore(mock_store, "uid1", "a1")
        assert {a.id for a in await service.list_appointments(mock_store)} == {"a1", "a2"}
        values = mock_store.update.await_args.args[1]
        assert values == {"deleted": False, "deletedBy": None, "deletedAt": None}

    @pytest.mark.asyncio
    async def test_restore_missing_appointment(self, service, mock_store):
        mock_store.get.return_value = None

        with pytest.raises(NotFoundError):
            await service.restore(mock_store, "uid1", "zz")

        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove(self, service, mock_store):
        await service.remove(mock_store, "uid1", "a1")

        mock_store.delete.assert_awaited_once_with("appointments/uid1/a1")

    @pytest.mark.asyncio
    async def test_remove_failure(self, service, mock_store):
        mock_store.delete.side_effect = ConnectionError("offline")

        with pytest.raises(StoreError) as exc_info:
            await service.remove(mock_store, "uid1", "a1")

        assert exc_info.value.message == "Failed to delete the appointment."


class TestUserService:

    USERS = {
        "u1": {"name": "Asha Khan", "email": "asha@example.com", "phone": "9000000001", "role": "admin"},
        "u2": {"name": "Ravi Patel", "email": "ravi@example.com", "phone": "9000000002"},
    }

    def test_search_users(self):
        assert [u.id for u in search_users(self.USERS, "RAVI")] == ["u2"]
        assert [u.id for u in search_users(self.USERS, "0001")] == ["u1"]
        assert len(search_users(self.USERS)) == 2

    @pytest.mark.asyncio
    async def test_get_role(self, mock_store):
        mock_store.get.return_value = self.USERS["u1"]

        role = await UserService().get_role(mock_store, "u1")

        mock_store.get.assert_awaited_once_with("users/u1")
        assert role.role == "admin"

    @pytest.mark.asyncio
    async def test_get_role_unknown_user(self, mock_store):
        with pytest.raises(NotFoundError):
            await UserService().get_role(mock_store, "ghost")
