"""
MedZeal Backend: Credit Cycle Routes
=====================================

GET  /api/credit-cycle?q=&page=&per_page=   pending vendor payments, searched and paginated
POST /api/credit-cycle/{v}/{p}/{h}/done      mark one delivery as paid
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.common import ErrorResponse
from medzeal.schemas.credit_cycle import MarkPaidResponse, PendingPaymentPage
from medzeal.services.credit_cycle import credit_cycle_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/credit-cycle", tags=["Credit Cycle"])


@router.get(
    "",
    response_model=PendingPaymentPage,
    responses={503: {"description": "Vendors could not be loaded", "model": ErrorResponse}},
    summary="List pending vendor payments",
)
async def list_pending_payments(
    q: str = Query(default="", description="Search vendor or product name (case-insensitive)"),
    page: int = Query(default=1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1, le=100, description="Defaults to CREDIT_CYCLE_PAGE_SIZE"),
    store: RealtimeStore = Depends(get_store),
) -> PendingPaymentPage:
    return await credit_cycle_service.list_pending(store, query=q, page=page, per_page=per_page)


@router.post(
    "/{vendor_id}/{product_id}/{history_id}/done",
    response_model=MarkPaidResponse,
    responses={500: {"description": "Failed to update payment.", "model": ErrorResponse}},
    summary="Mark a delivery as paid",
)
async def mark_payment_done(
    vendor_id: str,
    product_id: str,
    history_id: str,
    store: RealtimeStore = Depends(get_store),
) -> MarkPaidResponse:
    return await credit_cycle_service.mark_as_done(store, vendor_id, product_id, history_id)
