"""
storefront/schemas/order.py - Orders, order lines and the order status state machine.

Status transitions:
    pending → paid | failed | cancelled
Anything else (including leaving a terminal state) is rejected.
"""
from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.product import ProductSummary

CENT = Decimal("0.01")


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.CANCELLED}),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _TRANSITIONS.get(current, frozenset())


class OrderLine(BaseModel):
    """Frozen copy of a cart line, with the unit price read at checkout."""

    product_id: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    id: str
    user_id: str
    items: List[OrderLine]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    # latest gateway authority; every issued one stays in payment_authorities
    payment_authority: Optional[str] = None
    payment_authorities: List[str] = Field(default_factory=list)
    payment_ref_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


def order_total(lines: List[OrderLine]) -> Decimal:
    """Exact sum of the lines, rounded to cents once."""
    return sum((line.line_total for line in lines), Decimal("0")).quantize(CENT)


# ---------- responses ----------
class OrderLineOut(BaseModel):
    product_id: str
    quantity: int
    unit_price: float
    line_total: float
    product: Optional[ProductSummary] = None


class OrderOut(BaseModel):
    id: str
    user_id: str
    items: List[OrderLineOut] = Field(default_factory=list)
    total_amount: float
    status: OrderStatus
    payment_ref_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderPlacedOut(BaseModel):
    message: str = "Order placed successfully"
    order: OrderOut
