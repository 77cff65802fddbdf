"""
storefront/schemas/product.py - Read-only product records used by carts and checkout.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str
    name: str
    price: Decimal = Field(..., ge=0)
    category_id: Optional[str] = None
    description: str = ""
    image: Optional[str] = None

    def summary(self) -> "ProductSummary":
        return ProductSummary(id=self.id, name=self.name, price=float(self.price), image=self.image)


class ProductSummary(BaseModel):
    """Display data attached to cart and order lines."""

    id: str
    name: str
    price: float
    image: Optional[str] = None
