"""
MedZeal Backend: Credit Cycle Schemas
======================================

What:  The flat pending-payment record and its paginated listing.
Who:   Built by services.credit_cycle; returned by GET /api/credit-cycle.

Record fields mirror the credit-cycle table columns:
    vendor / product names, quantity, added date, credit cycle (days),
    due date, days left ("Overdue" when 0), unit price, total amount.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, computed_field

from medzeal.schemas.common import Number


class PendingPayment(BaseModel):
    """
    One history entry whose payment is still pending.

    Invariants:
        days_left >= 0 (clamped; past-due entries read 0)
        total_amount == added_quantity * product_price
    """
    vendor_id: str
    vendor_name: str
    product_id: str
    product_name: str
    history_id: str
    added_quantity: Number
    added_date: str = Field(description="Delivery date, YYYY-MM-DD (clinic time zone)")
    credit_cycle_days: int
    due_date: str = Field(description="added_date + credit_cycle_days, YYYY-MM-DD")
    days_left: int = Field(ge=0)
    product_price: Number
    total_amount: Number

    @computed_field
    @property
    def overdue(self) -> bool:
        return self.days_left == 0

    @property
    def key(self) -> Tuple[str, str, str]:
        """(vendor_id, product_id, history_id): identifies the record."""
        return (self.vendor_id, self.product_id, self.history_id)


class PendingPaymentPage(BaseModel):
    """
    One page of the (optionally searched) pending-payment list.

    `message` is set only when the filtered list is empty, and differs between
    "nothing matched the search" and "nothing is pending at all".
    """
    items: List[PendingPayment]
    page: int
    per_page: int
    total_items: int = Field(description="Records matching the search (all pages)")
    total_pages: int
    query: str = ""
    total_amount: Number = Field(description="Sum of total_amount over matching records")
    message: Optional[str] = None


class MarkPaidResponse(BaseModel):
    message: str = "Payment marked as done!"
    vendor_id: str
    product_id: str
    history_id: str
    remaining: int = Field(description="Pending records left in the in-memory list")
