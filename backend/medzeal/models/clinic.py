"""Write-side document models for the clinic's other store paths.

Same convention as models.inventory: snake_case attributes, camelCase aliases,
`to_document()` returns what is written.
"""

from typing import List, Optional

from pydantic import Field

from medzeal.models.inventory import StoreDocument, now_iso


class CatalogProductDocument(StoreDocument):
    """products/{id}: the sellable product catalog."""

    name: str
    price: float
    created_at: str = Field(default_factory=now_iso, alias="createdAt")


class BlogDocument(StoreDocument):
    """blogs/{id}. `date` is a display date (YYYY-MM-DD), not a timestamp."""

    title: str
    content: str
    date: str
    thumbnail: str


class DoseTimes(StoreDocument):
    morning: bool = False
    evening: bool = False
    night: bool = False


class MedicineDocument(StoreDocument):
    name: str
    consumption: str
    times: DoseTimes = Field(default_factory=DoseTimes)
    instruction: str = ""


class PrescriptionDocument(StoreDocument):
    """prescriptions/{patientId}/{id}"""

    patient_id: str = Field(alias="patientId")
    symptoms: str
    medicines: List[MedicineDocument]
    overall_instruction: str = Field(default="", alias="overallInstruction")
    date: str = Field(default_factory=now_iso)


class AppointmentApproval(StoreDocument):
    """
    Fields merged into appointments/{uid}/{id} on approval.

    Optional amounts are omitted (not written as null) when absent.
    """

    approved: bool = True
    payment_method: str = Field(alias="paymentMethod")
    price: float = 0
    consultant_amount: Optional[float] = Field(default=None, alias="consultantAmount")
    product_amount: Optional[float] = Field(default=None, alias="productAmount")
    product_description: Optional[str] = Field(default=None, alias="productDescription")

    def to_document(self):
        return self.model_dump(by_alias=True, exclude_none=True)


class AttendanceUpdate(StoreDocument):
    """Fields merged into appointments/{uid}/{id} from the attend page."""

    attended: bool
    price: Optional[float] = None
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")

    def to_document(self):
        return self.model_dump(by_alias=True, exclude_none=True)


class BinMarker(StoreDocument):
    """Soft delete. Restoring writes `deleted: False` and nulls the other two."""

    deleted: bool = True
    deleted_by: Optional[str] = Field(default=None, alias="deletedBy")
    deleted_at: Optional[str] = Field(default_factory=now_iso, alias="deletedAt")

    @classmethod
    def restored(cls) -> "BinMarker":
        return cls(deleted=False, deleted_by=None, deleted_at=None)
