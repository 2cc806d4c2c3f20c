"""
MedZeal Backend: Mail Service Interface
========================================

What:  Contract for delivering the appointment confirmation email.
How:   SmtpMailService implements it; routes and tests depend on this interface,
       so a different transport (or a fake) can be swapped in.
"""

from abc import ABC, abstractmethod

from medzeal.schemas.email import AppointmentEmailRequest


class MailService(ABC):
    @abstractmethod
    async def send_appointment_confirmation(self, request: AppointmentEmailRequest) -> None:
        """
        Send the "Appointment Approved" email to `request.recipient_email`.

        Raises:
            MailServiceError: delivery failed after retries
            CircuitBreakerOpenError: recent sends kept failing; rejected without trying
        """
        ...

    @abstractmethod
    def circuit_state(self) -> str:
        """closed, open or half_open; reported by /health."""
        ...
