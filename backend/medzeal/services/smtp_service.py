"""
MedZeal Backend: SMTP Mail Service
===================================

What:  Sends the appointment confirmation email over SMTP.
Who:   POST /api/send-email, after an admin approves an appointment.

Resilience:
    1. Tenacity retries the SMTP hand-off with exponential backoff + jitter
       (RETRY_MAX_ATTEMPTS, RETRY_MIN_WAIT, RETRY_MAX_WAIT).
    2. A circuit breaker counts sends that failed after all retries; once
       CB_FAILURE_THRESHOLD is reached, sends are rejected immediately for
       CB_RECOVERY_TIMEOUT seconds.

smtplib is blocking, so each attempt runs in a worker thread.
"""

import asyncio
import logging
import smtplib
import time
import uuid
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from medzeal.config import settings
from medzeal.exceptions import CircuitBreakerOpenError, MailServiceError
from medzeal.schemas.email import AppointmentEmailRequest
from medzeal.services.mail_base import MailService

logger = logging.getLogger(__name__)

SUBJECT = "Appointment Approved"

HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; padding: 20px; border: 1px solid #ccc; border-radius: 8px; max-width: 600px; margin: auto;">
    <div style="text-align: center;">
        <img src="{logo_url}" alt="{clinic} Logo" style="width: 150px; height: auto;" />
        <h1 style="color: #2c3e50;">Appointment Confirmation</h1>
    </div>
    <p>Dear {name},</p>
    <p>We are pleased to inform you that your appointment has been approved.</p>
    <p><strong>Appointment Details:</strong></p>
    <ul>
        <li><strong>Date:</strong> {date}</li>
        <li><strong>Time:</strong> {time}</li>
        <li><strong>Doctor:</strong> Dr. {doctor}</li>
    </ul>
    <p>If you have any questions or need further assistance, feel free to contact us.</p>
    <p>Thank you for choosing <strong>{clinic}</strong>!</p>
    <p>Best regards,<br/>The {clinic} Team</p>
    <div style="text-align: center; margin-top: 20px;">
        <p style="font-size: 12px; color: #777;">&copy; {year} {clinic}. All rights reserved.</p>
    </div>
</div>
"""

TEXT_TEMPLATE = """\
Dear {name},

We are pleased to inform you that your appointment has been approved.

Date: {date}
Time: {time}
Doctor: Dr. {doctor}

Thank you for choosing {clinic}!
The {clinic} Team
"""


def greeting_name(name: Optional[str]) -> str:
    return (name or "").strip() or "Customer"


def build_message(request: AppointmentEmailRequest, sender: str) -> MIMEMultipart:
    """Multipart (plain + HTML) confirmation; user-supplied values are HTML-escaped."""
    values = {
        "name": greeting_name(request.name),
        "date": request.appointment_date,
        "time": request.appointment_time,
        "doctor": request.doctor,
        "clinic": settings.clinic_name,
        "year": datetime.now().year,
    }

    msg = MIMEMultipart("alternative")
    msg["Subject"] = SUBJECT
    msg["From"] = sender
    msg["To"] = request.recipient_email
    msg.attach(MIMEText(TEXT_TEMPLATE.format(**values), "plain", "utf-8"))
    html_values = {k: escape(str(v)) for k, v in values.items()}
    msg.attach(MIMEText(HTML_TEMPLATE.format(logo_url=settings.clinic_logo_url, **html_values), "html", "utf-8"))
    return msg


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════


class CircuitBreaker:
    """
    CLOSED → OPEN after `failure_threshold` consecutive failures.
    OPEN rejects with CircuitBreakerOpenError until `recovery_timeout` has passed,
    then HALF_OPEN lets one send through: success closes, failure re-opens.

    Single event loop, no locking.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Raises:
            CircuitBreakerOpenError: OPEN and still within the recovery timeout
        """
        if self.state != self.OPEN:
            return True

        elapsed = time.time() - (self.last_failure_time or 0)
        if elapsed >= self.recovery_timeout:
            logger.info("Mail circuit breaker HALF_OPEN after %.1fs", elapsed)
            self.state = self.HALF_OPEN
            return True
        raise CircuitBreakerOpenError(recovery_time=max(1, int(self.recovery_timeout - elapsed)))

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Mail circuit breaker CLOSED (SMTP recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()
        if self.state == self.HALF_OPEN:
            logger.warning("Mail circuit breaker back to OPEN (trial send failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning("Mail circuit breaker OPEN after %d consecutive failures", self.failure_count)
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# SMTP Service
# ══════════════════════════════════════════════════════════════════════════


class SmtpMailService(MailService):
    def __init__(self):
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

    def circuit_state(self) -> str:
        return self.circuit_breaker.state

    async def send_appointment_confirmation(self, request: AppointmentEmailRequest) -> None:
        request_id = uuid.uuid4().hex[:8]
        self.circuit_breaker.can_execute()

        message = build_message(request, settings.sender_address)
        logger.info("[%s] Sending appointment confirmation to %s", request_id, request.recipient_email)

        try:
            await self._send_with_retry(message, request_id)
        except RetryError as e:
            self.circuit_breaker.record_failure()
            cause = e.last_attempt.exception() if e.last_attempt else None
            raise MailServiceError(
                message=str(cause) if cause else "Email delivery failed",
                context={"request_id": request_id},
            )
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error("[%s] Email delivery failed: %s", request_id, e)
            raise MailServiceError(
                message=str(e) or type(e).__name__,
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

        self.circuit_breaker.record_success()
        logger.info("[%s] Email sent to %s", request_id, request.recipient_email)

    @retry(
        retry=retry_if_exception_type((smtplib.SMTPException, OSError)),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send_with_retry(self, message: MIMEMultipart, request_id: str) -> None:
        start_time = time.time()
        await asyncio.to_thread(self._deliver, message)
        logger.debug("[%s] SMTP hand-off took %.0fms", request_id, (time.time() - start_time) * 1000)

    def _deliver(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(message)


mail_service = SmtpMailService()
