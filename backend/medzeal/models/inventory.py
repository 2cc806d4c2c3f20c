"""
MedZeal Backend: Inventory Document Models
===========================================

What:  Shapes of the vendor/product/history nodes this service WRITES.
Why:   The store is schemaless; these models pin field names (camelCase, as the
       admin frontend reads them) and numeric types at the write boundary.
How:   Pydantic models with snake_case attributes and camelCase aliases;
       `to_document()` produces the JSON written to the store.

Stored shape:
    vendors/{vendorId}
    ├── name, number, address
    └── products/{productId}
        ├── name, productPrice, mrpPrice, quantity, avgQuantity,
        │   creditCycleDate, lastUpdated
        ├── history/{historyId}
        │   └── date, addedQuantity, newQuantity, payment ("pending" | "done")
        └── sellhistory/{entryId}
            └── date, soldQuantity, remainingQuantity, saleId

    sales/{saleId}
    └── customerName, customerNumber, date, discountPercentage,
        discountAmount, finalAmount, products/productSale-{i}

Reads are NOT parsed through these models: snapshots written by older
frontends may miss fields, and aggregations walk the raw tree tolerantly.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

PAYMENT_PENDING = "pending"
PAYMENT_DONE = "done"

PaymentStatus = Literal["pending", "done"]


def now_iso() -> str:
    """UTC timestamp in the same form the browser's toISOString() writes."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StoreDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class HistoryDocument(StoreDocument):
    """
    One stock delivery. Created `pending`; the credit-cycle page flips
    `payment` to `done` once the vendor has been paid.
    """

    date: str = Field(default_factory=now_iso)
    added_quantity: int = Field(alias="addedQuantity")
    new_quantity: Union[int, float] = Field(alias="newQuantity")
    payment: PaymentStatus = PAYMENT_PENDING


class ProductDocument(StoreDocument):
    """A product supplied by one vendor. History is pushed separately."""

    name: str
    avg_quantity: int = Field(alias="avgQuantity")
    quantity: int
    product_price: float = Field(alias="productPrice")
    mrp_price: float = Field(alias="mrpPrice")
    credit_cycle_date: int = Field(alias="creditCycleDate")
    last_updated: str = Field(default_factory=now_iso, alias="lastUpdated")


class VendorDocument(StoreDocument):
    """Vendor header fields; products are pushed as children after creation."""

    name: str
    number: str
    address: str


class SellHistoryDocument(StoreDocument):
    date: str = Field(default_factory=now_iso)
    sold_quantity: int = Field(alias="soldQuantity")
    remaining_quantity: Union[int, float] = Field(alias="remainingQuantity")
    sale_id: str = Field(alias="saleId")


class SaleLineDocument(StoreDocument):
    """One sold product inside sales/{saleId}/products."""

    product_id: str = Field(alias="productId")
    product_name: str = Field(alias="productName")
    vendor_id: str = Field(alias="vendorId")
    quantity: int
    mrp_price: Union[int, float] = Field(alias="mrpPrice")
    total_price: Union[int, float] = Field(alias="totalPrice")


class SaleDocument(StoreDocument):
    customer_name: str = Field(alias="customerName")
    customer_number: str = Field(alias="customerNumber")
    date: str = Field(default_factory=now_iso)
    products: Dict[str, SaleLineDocument]
    discount_percentage: float = Field(alias="discountPercentage")
    discount_amount: float = Field(alias="discountAmount")
    final_amount: float = Field(alias="finalAmount")
