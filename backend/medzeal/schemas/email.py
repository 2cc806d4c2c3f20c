"""
POST /api/send-email wire format.

The admin approval page posts camelCase keys and reads `message` on success,
`error` + `details` on failure. These shapes are kept exactly.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AppointmentEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_email: str = Field(alias="recipientEmail")
    appointment_date: str = Field(default="", alias="appointmentDate")
    appointment_time: str = Field(default="", alias="appointmentTime")
    doctor: str = ""
    name: Optional[str] = None


class EmailSentResponse(BaseModel):
    message: str = "Email sent successfully!"


class EmailErrorResponse(BaseModel):
    error: str = "Error sending email."
    details: str
