"""
MedZeal Backend: Test Configuration (conftest.py)
==================================================

Shared fixtures. No test touches the real realtime database or an SMTP server:
the store is an AsyncMock injected through `get_store`, and smtplib is patched.

Fixtures:
    mock_store         AsyncMock RealtimeStore (get/set/update/push/delete/listen)
    vendors_tree       vendors subtree with pending, done and overdue deliveries
    appointments_tree  two users' appointments in assorted states
    temp_storage       per-test thumbnail directory
    sample_jpeg_bytes  smallest JPEG libmagic recognizes
    test_client        httpx AsyncClient over ASGITransport, store overridden
"""

import os
import tempfile
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read on first import of medzeal.config; set them first
os.environ["ENABLE_LIVE_SUBSCRIPTIONS"] = "false"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="medzeal_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CLINIC_TIMEZONE"] = "Asia/Kolkata"
os.environ["SMTP_USERNAME"] = "clinic@example.com"
os.environ["SMTP_PASSWORD"] = "not-a-real-password"
os.environ["RETRY_MAX_ATTEMPTS"] = "2"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from medzeal.database import get_store  # noqa: E402
from medzeal.services import credit_cycle  # noqa: E402
from medzeal.services.subscriptions import IDLE, live_snapshots  # noqa: E402



@pytest.fixture(autouse=True)
def reset_live_state():
    """Snapshots and the payment ledger are process-wide; start each test clean."""
    for snapshot in live_snapshots.all():
        snapshot._tree = None
        snapshot._status = IDLE
        snapshot._error = None
        snapshot._registration = None
    credit_cycle.credit_cycle_service.ledger = credit_cycle.PaymentLedger()
    yield


@pytest.fixture
def mock_store():
    store = AsyncMock()
    store.get = AsyncMock(return_value=None)
    store.set = AsyncMock()
    store.update = AsyncMock()
    store.push = AsyncMock(return_value="new-key")
    store.delete = AsyncMock()
    store.listen = AsyncMock()
    return store


@pytest.fixture
def vendors_tree():
    """
    With today = 2024-01-15:
        V1/P1/H1  pending, due 2024-01-31, 16 days left, total 200
        V1/P1/H2  done (never listed)
        V1/P2/H3  pending, due 2023-12-30, overdue, total 202.0
        V2/P3/H4  pending, UTC timestamp (2024-01-10 in IST), due 2024-03-10, 55 days left
    Low stock: P1 (5 < 10) and P3 (0 < 5).
    """
    return {
        "V1": {
            "name": "Acme Pharma",
            "number": "9876543210",
            "address": "Mumbra",
            "products": {
                "P1": {
                    "name": "Bandage",
                    "productPrice": 100,
                    "mrpPrice": 120,
                    "creditCycleDate": 30,
                    "quantity": 5,
                    "avgQuantity": 10,
                    "history": {
                        "H1": {"addedQuantity": 2, "newQuantity": 5, "date": "2024-01-01", "payment": "pending"},
                        "H2": {"addedQuantity": 3, "newQuantity": 3, "date": "2023-12-01", "payment": "done"},
                    },
                },
                "P2": {
                    "name": "Gauze",
                    "productPrice": 50.5,
                    "mrpPrice": 60,
                    "creditCycleDate": 10,
                    "quantity": 20,
                    "avgQuantity": 10,
                    "history": {
                        "H3": {"addedQuantity": 4, "newQuantity": 20, "date": "2023-12-20", "payment": "pending"},
                    },
                },
            },
        },
        "V2": {
            "name": "Zen Supplies",
            "number": "9123456780",
            "address": "Thane",
            "products": {
                "P3": {
                    "name": "Syringe",
                    "productPrice": 10,
                    "creditCycleDate": 60,
                    "quantity": 0,
                    "avgQuantity": 5,
                    "history": {
                        "H4": {"addedQuantity": 10, "newQuantity": 10, "date": "2024-01-10T06:00:00.000Z", "payment": "pending"},
                    },
                },
            },
        },
    }


@pytest.fixture
def appointments_tree():
    return {
        "uid1": {
            "a1": {
                "name": "Asha Khan", "phone": "9000000001", "doctor": "Saheba",
                "appointmentDate": "2024-01-15", "appointmentTime": "11:30 AM",
                "message": "Back pain", "approved": False,
            },
            "a2": {
                "name": "Asha Khan", "phone": "9000000001", "doctor": "Shoeb",
                "appointmentDate": "2024-02-03", "appointmentTime": "5:00 PM",
                "message": "Follow-up", "approved": True, "attended": True,
                "paymentMethod": "Cash", "price": 500,
            },
        },
        "uid2": {
            "a3": {
                "name": "Ravi Patel", "phone": "9000000002", "doctor": "Shajar",
                "appointmentDate": "2023-12-28", "appointmentTime": "2:00 PM",
                "message": "Knee", "approved": True, "deleted": True,
            },
        },
    }


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_jpeg_bytes():
    # SOI + JFIF APP0 header + EOI
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest_asyncio.fixture
async def test_client(mock_store):
    from medzeal.main import create_app

    app = create_app()
    app.dependency_overrides[get_store] = lambda: mock_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
