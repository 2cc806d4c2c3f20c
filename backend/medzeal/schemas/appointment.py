"""
MedZeal Backend: Appointment Schemas
=====================================

Appointments are stored per user (appointments/{uid}/{id}) and listed flattened,
each item carrying its `user_id`.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from medzeal.schemas.common import Number


class Appointment(BaseModel):
    id: str
    user_id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    doctor: str = ""
    appointment_date: str = Field(default="", description="YYYY-MM-DD")
    appointment_time: str = ""
    message: str = ""
    approved: bool = False
    attended: bool = False
    deleted: bool = False
    payment_method: Optional[str] = None
    price: Optional[Number] = None
    consultant_amount: Optional[Number] = None
    product_amount: Optional[Number] = None
    product_description: Optional[str] = None


class ApprovalInput(BaseModel):
    """
    Approval form. Amounts are optional; product fields are only written when
    `add_product` is set.
    """
    model_config = ConfigDict(populate_by_name=True)

    payment_method: str = Field(default="", alias="paymentMethod")
    price: Optional[float] = None
    consultant_amount: Optional[float] = Field(default=None, alias="consultantAmount")
    add_product: bool = Field(default=False, alias="addProduct")
    product_amount: Optional[float] = Field(default=None, alias="productAmount")
    product_description: Optional[str] = Field(default=None, alias="productDescription")


class AttendanceInput(BaseModel):
    """Attend page: price and payment method are required only when `attended` is true."""
    model_config = ConfigDict(populate_by_name=True)

    attended: bool = True
    price: Optional[float] = None
    payment_method: str = Field(default="Cash", alias="paymentMethod")


class BinInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted_by: str = Field(default="", alias="deletedBy", description="Email of the admin moving it")
