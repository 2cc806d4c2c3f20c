"""Catalog product routes (products/*)."""

from typing import List

from fastapi import APIRouter, Depends

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.catalog import CatalogProduct, CatalogProductInput
from medzeal.schemas.common import ErrorResponse, MessageResponse
from medzeal.services.catalog_service import catalog_service

router = APIRouter(prefix="/api/products", tags=["Catalog"])

_ERRORS = {
    400: {"description": "Name or price missing", "model": ErrorResponse},
    500: {"description": "Write failed", "model": ErrorResponse},
}


@router.get("", response_model=List[CatalogProduct], summary="List catalog products")
async def list_products(store: RealtimeStore = Depends(get_store)) -> List[CatalogProduct]:
    return await catalog_service.list_products(store)


@router.post("", status_code=201, response_model=CatalogProduct, responses=_ERRORS, summary="Add a product")
async def create_product(
    payload: CatalogProductInput,
    store: RealtimeStore = Depends(get_store),
) -> CatalogProduct:
    return await catalog_service.create_product(store, payload)


@router.put("/{product_id}", response_model=CatalogProduct, responses=_ERRORS, summary="Update name and price")
async def update_product(
    product_id: str,
    payload: CatalogProductInput,
    store: RealtimeStore = Depends(get_store),
) -> CatalogProduct:
    return await catalog_service.update_product(store, product_id, payload)


@router.delete("/{product_id}", response_model=MessageResponse, responses=_ERRORS, summary="Delete a product")
async def delete_product(product_id: str, store: RealtimeStore = Depends(get_store)) -> MessageResponse:
    await catalog_service.delete_product(store, product_id)
    return MessageResponse(message="Product deleted successfully.", id=product_id)
