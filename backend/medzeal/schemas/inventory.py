"""
MedZeal Backend: Inventory Schemas
===================================

Request bodies accept camelCase (as the admin forms post them) or snake_case.
Numeric fields are optional at the type level: "required" and range rules are
business validation in InventoryService, reported as 400 with per-field errors.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from medzeal.schemas.common import Number


class _Input(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProductInput(_Input):
    name: str = ""
    avg_quantity: Optional[int] = Field(default=None, alias="avgQuantity")
    quantity: Optional[int] = None
    product_price: Optional[float] = Field(default=None, alias="productPrice")
    mrp_price: Optional[float] = Field(default=None, alias="mrpPrice")
    credit_cycle_date: Optional[int] = Field(
        default=None, alias="creditCycleDate", description="Days until payment is due"
    )


class VendorCreate(_Input):
    name: str = ""
    number: str = Field(default="", description="10-digit phone number")
    address: str = ""
    products: List[ProductInput] = Field(default_factory=list)


class StockInput(_Input):
    quantity: Optional[int] = Field(default=None, description="Units delivered (positive)")


# ── Responses ─────────────────────────────────────────────────────────────


class VendorSummary(BaseModel):
    id: str
    name: str
    number: str
    address: str
    product_count: int


class HistoryEntry(BaseModel):
    id: str
    date: str
    added_quantity: Number
    new_quantity: Number
    payment: str


class ProductDetail(BaseModel):
    id: str
    name: str
    quantity: Number
    avg_quantity: Number
    product_price: Number
    mrp_price: Number
    credit_cycle_date: int
    last_updated: Optional[str] = None
    low_stock: bool
    history: List[HistoryEntry] = Field(description="Newest first")


class VendorDetail(BaseModel):
    id: str
    name: str
    number: str
    address: str
    products: List[ProductDetail]


class ProductListItem(BaseModel):
    vendor_id: str
    vendor_name: str
    vendor_number: str
    product_id: str
    name: str
    quantity: Number
    avg_quantity: Number
    product_price: Number
    mrp_price: Number
    credit_cycle_date: int
    low_stock: bool
    shortfall: Number = Field(description="avg_quantity - quantity")


class LowStockResponse(BaseModel):
    count: int
    message: Optional[str] = None


class DashboardCounts(BaseModel):
    appointments: int
    blogs: int
    low_stock: int


class VendorCreated(BaseModel):
    message: str = "Vendor and products added successfully!"
    id: str
    product_ids: List[str]


class ProductCreated(BaseModel):
    message: str = "New product added successfully!"
    vendor_id: str
    id: str


class StockAdded(BaseModel):
    message: str = "Quantity updated and history saved successfully!"
    vendor_id: str
    product_id: str
    history_id: str
    added_quantity: int
    new_quantity: Number


class SaleItemInput(_Input):
    vendor_id: str = Field(default="", alias="vendorId")
    product_id: str = Field(default="", alias="productId")
    quantity: Optional[int] = None


class SaleInput(_Input):
    """Point-of-sale form. Prices come from the stored product's MRP, not the request."""
    customer_name: str = Field(default="", alias="customerName")
    customer_number: str = Field(default="", alias="customerNumber", description="10 digits")
    items: List[SaleItemInput] = Field(default_factory=list)
    discount_percentage: float = Field(default=0, alias="discountPercentage", description="0-100")


class SoldItem(BaseModel):
    vendor_id: str
    product_id: str
    name: str
    quantity: int
    mrp_price: Number
    total_price: Number
    remaining_quantity: Number


class SaleRecorded(BaseModel):
    message: str = "Sale processed successfully!"
    id: str
    items: List[SoldItem]
    total_amount: Number
    discount_amount: Number
    final_amount: Number
