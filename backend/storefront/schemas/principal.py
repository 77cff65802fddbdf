"""
storefront/schemas/principal.py
Roles and the Identity carried by a verified bearer token.
"""
import enum

from pydantic import BaseModel, Field


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Identity(BaseModel):
    """Who is calling. Built from token claims only; lives for one request."""

    subject: str = Field(..., description="User id (token `sub` claim)")
    role: Role = Field(..., description="customer | admin")

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
