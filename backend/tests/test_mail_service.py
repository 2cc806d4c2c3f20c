"""
MedZeal Backend: Mail Service Tests
====================================

What:  Confirmation message content, circuit breaker transitions, and the SMTP
       send path with tenacity retries.
How:   smtplib.SMTP is patched; retries use zero waits (see conftest).
"""

import smtplib
import time
from unittest.mock import patch

import pytest

from medzeal.config import settings
from medzeal.exceptions import CircuitBreakerOpenError, MailServiceError
from medzeal.schemas.email import AppointmentEmailRequest
from medzeal.services.smtp_service import (
    SUBJECT,
    CircuitBreaker,
    SmtpMailService,
    build_message,
    greeting_name,
)

SMTP = "medzeal.services.smtp_service.smtplib.SMTP"


def _request(**overrides):
    data = {
        "recipientEmail": "asha@example.com",
        "appointmentDate": "2024-01-20",
        "appointmentTime": "11:30 AM",
        "doctor": "Saheba",
        "name": "Asha",
    }
    data.update(overrides)
    return AppointmentEmailRequest.model_validate(data)


def _parts(message):
    return {part.get_content_type(): part.get_payload(decode=True).decode() for part in message.get_payload()}


class TestMessage:

    @pytest.mark.parametrize("name,expected", [("Asha", "Asha"), ("  ", "Customer"), (None, "Customer")])
    def test_greeting_name(self, name, expected):
        assert greeting_name(name) == expected

    def test_headers_and_details(self):
        message = build_message(_request(), "clinic@example.com")

        assert message["Subject"] == SUBJECT
        assert message["To"] == "asha@example.com"
        assert message["From"] == "clinic@example.com"
        parts = _parts(message)
        assert "Dear Asha," in parts["text/plain"]
        assert "Dr. Saheba" in parts["text/html"]
        assert "11:30 AM" in parts["text/html"]

    def test_missing_name_greets_customer(self):
        parts = _parts(build_message(_request(name=None), "clinic@example.com"))

        assert "Dear Customer," in parts["text/plain"]

    def test_html_values_escaped(self):
        parts = _parts(build_message(_request(name="<b>Eve</b>"), "clinic@example.com"))

        assert "<b>Eve</b>" not in parts["text/html"]
        assert "&lt;b&gt;Eve&lt;/b&gt;" in parts["text/html"]


class TestCircuitBreaker:
    """CLOSED → OPEN → HALF_OPEN → CLOSED/OPEN."""

    def test_opens_at_threshold(self):
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60)

        breaker.record_failure()
        assert breaker.state == CircuitBreaker.CLOSED
        breaker.record_failure()
        assert breaker.state == CircuitBreaker.OPEN

        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            breaker.can_execute()
        assert 1 <= exc_info.value.retry_after <= 60

    def test_half_open_after_timeout(self):
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=10)
        breaker.record_failure()
        breaker.record_failure()
        breaker.last_failure_time = time.time() - 11

        assert breaker.can_execute() is True
        assert breaker.state == CircuitBreaker.HALF_OPEN

    def test_half_open_failure_reopens(self):
        breaker = CircuitBreaker(failure_threshold=5, recovery_timeout=10)
        breaker.state = CircuitBreaker.HALF_OPEN

        breaker.record_failure()

        assert breaker.state == CircuitBreaker.OPEN

    def test_success_resets(self):
        breaker = CircuitBreaker(failure_threshold=3)
        breaker.record_failure()
        breaker.record_failure()

        breaker.record_success()

        assert breaker.failure_count == 0
        assert breaker.state == CircuitBreaker.CLOSED


class TestSmtpMailService:

    @pytest.mark.asyncio
    async def test_send_success(self):
        service = SmtpMailService()

        with patch(SMTP) as smtp_cls:
            await service.send_appointment_confirmation(_request())

        smtp_cls.assert_called_once_with(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout)
        server = smtp_cls.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with(settings.smtp_username, settings.smtp_password)
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "asha@example.com"
        assert service.circuit_state() == CircuitBreaker.CLOSED

    @pytest.mark.asyncio
    async def test_retries_then_fails(self):
        service = SmtpMailService()

        with patch(SMTP, side_effect=smtplib.SMTPException("connection refused")) as smtp_cls:
            with pytest.raises(MailServiceError) as exc_info:
                await service.send_appointment_confirmation(_request())

        assert smtp_cls.call_count == settings.retry_max_attempts
        assert exc_info.value.message == "connection refused"
        assert service.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self):
        service = SmtpMailService()

        with patch(SMTP) as smtp_cls:
            smtp_cls.side_effect = [OSError("reset"), smtp_cls.return_value]
            await service.send_appointment_confirmation(_request())

        assert smtp_cls.call_count == 2
        assert service.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_non_smtp_error_not_retried(self):
        service = SmtpMailService()

        with patch(SMTP, side_effect=ValueError("bad header")) as smtp_cls:
            with pytest.raises(MailServiceError):
                await service.send_appointment_confirmation(_request())

        assert smtp_cls.call_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_rejects_fast(self):
        service = SmtpMailService()
        for _ in range(service.circuit_breaker.failure_threshold):
            service.circuit_breaker.record_failure()

        with patch(SMTP) as smtp_cls:
            with pytest.raises(CircuitBreakerOpenError):
                await service.send_appointment_confirmation(_request())

        smtp_cls.assert_not_called()
