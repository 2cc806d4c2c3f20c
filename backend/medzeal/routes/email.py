"""
MedZeal Backend: Send Email Route
==================================

POST /api/send-email
    body   {recipientEmail, appointmentDate, appointmentTime, doctor, name}
    200    {"message": "Email sent successfully!"}
    500    {"error": "Error sending email.", "details": "<reason>"}

Failures are raised as MailServiceError; the handler in main.py writes the
500 body (plus Retry-After when the circuit breaker is open).
"""

from fastapi import APIRouter

from medzeal.schemas.email import AppointmentEmailRequest, EmailErrorResponse, EmailSentResponse
from medzeal.services import smtp_service

router = APIRouter(prefix="/api", tags=["Email"])


@router.post(
    "/send-email",
    response_model=EmailSentResponse,
    responses={500: {"description": "Email could not be sent", "model": EmailErrorResponse}},
    summary="Send the appointment confirmation email",
)
async def send_email(payload: AppointmentEmailRequest) -> EmailSentResponse:
    await smtp_service.mail_service.send_appointment_confirmation(payload)
    return EmailSentResponse()
