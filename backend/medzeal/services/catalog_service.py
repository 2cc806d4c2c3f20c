"""Catalog products (products/*): the clinic's sellable items and their prices."""

import logging
from typing import List

from medzeal.exceptions import NotFoundError, StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.clinic import CatalogProductDocument
from medzeal.schemas.catalog import CatalogProduct, CatalogProductInput
from medzeal.services.subscriptions import fetch
from medzeal.services.tree import as_dict, number, text

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Please enter both product name and price."


def _validate(payload: CatalogProductInput) -> None:
    if not payload.name.strip() or payload.price is None:
        raise ValidationError(
            message=REQUIRED_MESSAGE,
            field="name" if not payload.name.strip() else "price",
        )


class CatalogService:
    async def list_products(self, store) -> List[CatalogProduct]:
        tree = await fetch(store, paths.PRODUCTS)
        return [
            CatalogProduct(
                id=product_id,
                name=text(product.get("name")),
                price=number(product.get("price")),
                created_at=product.get("createdAt"),
            )
            for product_id, product in ((k, as_dict(v)) for k, v in as_dict(tree).items())
        ]

    async def create_product(self, store, payload: CatalogProductInput) -> CatalogProduct:
        _validate(payload)
        document = CatalogProductDocument(name=payload.name.strip(), price=payload.price)
        try:
            product_id = await store.push(paths.PRODUCTS, document.to_document())
        except Exception as e:
            logger.error("Adding catalog product failed: %s", e, exc_info=True)
            raise StoreError(message="Failed to add product. Please try again.")

        logger.info("Catalog product %s added: %s", product_id, document.name)
        return CatalogProduct(
            id=product_id, name=document.name, price=document.price, created_at=document.created_at
        )

    async def update_product(self, store, product_id: str, payload: CatalogProductInput) -> CatalogProduct:
        """Replace name and price; `createdAt` is kept."""
        _validate(payload)
        product_path = paths.catalog_product_path(product_id)
        existing = await fetch(store, product_path)
        if not existing:
            raise NotFoundError(resource="Product", resource_id=product_id)

        name = payload.name.strip()
        try:
            await store.update(product_path, {"name": name, "price": payload.price})
        except Exception as e:
            logger.error("Updating catalog product %s failed: %s", product_id, e, exc_info=True)
            raise StoreError(message="Failed to update product. Please try again.")

        return CatalogProduct(
            id=product_id, name=name, price=payload.price, created_at=as_dict(existing).get("createdAt")
        )

    async def delete_product(self, store, product_id: str) -> None:
        # Vendor history never references catalog products; nothing cascades
        try:
            await store.delete(paths.catalog_product_path(product_id))
        except Exception as e:
            logger.error("Deleting catalog product %s failed: %s", product_id, e, exc_info=True)
            raise StoreError(message="Failed to delete product. Please try again.")
        logger.info("Catalog product %s deleted", product_id)


catalog_service = CatalogService()
