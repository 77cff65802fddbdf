"""
storefront/schemas/discount.py - Pydantic models for discount codes.
Codes are standalone records; they are not applied to order totals.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DiscountCode(BaseModel):
    code: str
    percentage: float = Field(..., gt=0, le=100)
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


class DiscountCreate(BaseModel):
    code: Optional[str] = Field(None, min_length=3, max_length=64, description="Leave empty for a generated code")
    percentage: float = Field(..., gt=0, le=100, description="Discount percentage (e.g. 20 for 20% off)")
    expires_at: datetime = Field(..., description="Expiry timestamp")

    @field_validator("expires_at")
    @classmethod
    def _aware_future(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError("expires_at must be in the future")
        return v


class DiscountOut(BaseModel):
    code: str
    percentage: float
    expires_at: datetime
    expired: bool
