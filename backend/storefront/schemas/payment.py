"""
storefront/schemas/payment.py - Payment request/verification bodies.
"""
from typing import Optional

from pydantic import BaseModel, Field


class PayBody(BaseModel):
    order_id: str = Field(..., min_length=1, description="Pending order to pay for")
    description: Optional[str] = Field(None, max_length=255, description="Shown on the gateway page")


class PaymentLinkOut(BaseModel):
    payment_url: str
    authority: str


class PaymentVerifiedOut(BaseModel):
    message: str = "Payment successful"
    ref_id: str
    order_id: str
