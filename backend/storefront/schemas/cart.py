"""
storefront/schemas/cart.py - Pydantic models for Cart.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.schemas.product import ProductSummary

_INVISIBLE = ("\u200b", "\u200c", "\u200d", "\ufeff", "\xa0")


class AddItemBody(BaseModel):
    """Add to cart by product id."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", description="Product ID")
    quantity: int = Field(1, ge=1, le=10000, description="Quantity (>=1).")

    @field_validator("product_id")
    @classmethod
    def _clean_pid(cls, v: str) -> str:
        v = (v or "").strip()
        for ch in _INVISIBLE:
            v = v.replace(ch, "")
        if not v:
            raise ValueError("product_id cannot be empty")
        return v


class CartLine(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class Cart(BaseModel):
    user_id: str
    items: List[CartLine] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    def add(self, product_id: str, quantity: int) -> None:
        """Increment an existing line or append a new one; lines never duplicate."""
        for line in self.items:
            if line.product_id == product_id:
                line.quantity += quantity
                return
        self.items.append(CartLine(product_id=product_id, quantity=quantity))

    def remove(self, product_id: str) -> bool:
        before = len(self.items)
        self.items = [line for line in self.items if line.product_id != product_id]
        return len(self.items) != before


# ---------- responses ----------
class CartLineOut(BaseModel):
    product_id: str
    quantity: int
    product: Optional[ProductSummary] = None
    unresolved: bool = False
    subtotal: float = 0.0


class CartOut(BaseModel):
    user_id: str
    items: List[CartLineOut] = Field(default_factory=list)
    total_quantity: int = 0
    total_amount: float = 0.0


class CartUpdatedOut(BaseModel):
    message: str
    cart: CartOut
