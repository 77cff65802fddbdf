"""
storefront/schemas/user.py - Accounts, registration and login bodies.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from storefront.schemas.principal import Role


class User(BaseModel):
    id: str
    username: str
    email: str
    password_hash: str
    role: Role = Role.CUSTOMER
    created_at: Optional[datetime] = None


class RegisterBody(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, description="Username is required")
    email: EmailStr = Field(..., description="Valid email is required")
    password: str = Field(..., min_length=6, max_length=128, description="Password must be at least 6 characters long")

    @field_validator("username")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class LoginBody(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    role: Role


class RegisterOut(BaseModel):
    message: str = "User registered successfully"
    user: UserOut


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
