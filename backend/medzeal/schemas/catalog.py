"""Catalog product schemas (products/*)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from medzeal.schemas.common import Number


class CatalogProductInput(BaseModel):
    """Create and update body; both fields are required by the form."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    price: Optional[float] = None


class CatalogProduct(BaseModel):
    id: str
    name: str
    price: Number
    created_at: Optional[str] = Field(default=None, description="ISO timestamp set on creation")
