"""
MedZeal Backend: Vendor & Inventory Routes
===========================================

Vendors own products; each stock delivery is recorded as a pending history
entry that the credit-cycle page later settles. Sales draw stock back down.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.common import ErrorResponse
from medzeal.schemas.inventory import (
    DashboardCounts,
    LowStockResponse,
    ProductCreated,
    ProductInput,
    ProductListItem,
    SaleInput,
    SaleRecorded,
    StockAdded,
    StockInput,
    VendorCreate,
    VendorCreated,
    VendorDetail,
    VendorSummary,
)
from medzeal.services.inventory_service import inventory_service

router = APIRouter(prefix="/api", tags=["Inventory"])

_ERRORS = {
    400: {"description": "Form validation failed", "model": ErrorResponse},
    404: {"description": "Vendor or product not found", "model": ErrorResponse},
    500: {"description": "Write failed", "model": ErrorResponse},
}


@router.get("/vendors", response_model=List[VendorSummary], summary="List vendors")
async def list_vendors(store: RealtimeStore = Depends(get_store)) -> List[VendorSummary]:
    return await inventory_service.list_vendors(store)


@router.post(
    "/vendors",
    status_code=201,
    response_model=VendorCreated,
    responses=_ERRORS,
    summary="Create a vendor with its products",
)
async def create_vendor(payload: VendorCreate, store: RealtimeStore = Depends(get_store)) -> VendorCreated:
    return await inventory_service.create_vendor(store, payload)


@router.get(
    "/vendors/{vendor_id}",
    response_model=VendorDetail,
    responses={404: {"description": "Vendor not found", "model": ErrorResponse}},
    summary="Vendor with products and delivery history",
)
async def get_vendor(vendor_id: str, store: RealtimeStore = Depends(get_store)) -> VendorDetail:
    return await inventory_service.get_vendor(store, vendor_id)


@router.post(
    "/vendors/{vendor_id}/products",
    status_code=201,
    response_model=ProductCreated,
    responses=_ERRORS,
    summary="Add a product to a vendor",
)
async def add_product(
    vendor_id: str,
    payload: ProductInput,
    store: RealtimeStore = Depends(get_store),
) -> ProductCreated:
    return await inventory_service.add_product(store, vendor_id, payload)


@router.post(
    "/vendors/{vendor_id}/products/{product_id}/stock",
    status_code=201,
    response_model=StockAdded,
    responses=_ERRORS,
    summary="Record a stock delivery",
)
async def add_stock(
    vendor_id: str,
    product_id: str,
    payload: StockInput,
    store: RealtimeStore = Depends(get_store),
) -> StockAdded:
    return await inventory_service.add_stock(store, vendor_id, product_id, payload.quantity)


@router.post(
    "/inventory/sales",
    status_code=201,
    response_model=SaleRecorded,
    responses=_ERRORS,
    summary="Record a sale and deduct stock",
)
async def record_sale(payload: SaleInput, store: RealtimeStore = Depends(get_store)) -> SaleRecorded:
    return await inventory_service.record_sale(store, payload)


@router.get("/inventory/products", response_model=List[ProductListItem], summary="All products across vendors")
async def list_products(
    q: Optional[str] = Query(default=None, description="Search product or vendor name"),
    store: RealtimeStore = Depends(get_store),
) -> List[ProductListItem]:
    return await inventory_service.list_products(store, q)


@router.get("/inventory/low-stock", response_model=LowStockResponse, summary="Low-stock product count")
async def low_stock(store: RealtimeStore = Depends(get_store)) -> LowStockResponse:
    count = await inventory_service.count_low_stock(store)
    message = None
    if count == 1:
        message = "1 product is out of stock."
    elif count > 1:
        message = f"{count} products are out of stock."
    return LowStockResponse(count=count, message=message)


@router.get("/inventory/dashboard", response_model=DashboardCounts, summary="Dashboard counters")
async def dashboard(store: RealtimeStore = Depends(get_store)) -> DashboardCounts:
    return await inventory_service.dashboard(store)
