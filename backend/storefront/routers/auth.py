"""
storefront/routers/auth.py
- POST /auth/register → creates a customer account (email must be unused)
- POST /auth/login    → returns a bearer token valid for one hour
Admins are promoted out of band (see `set_admin_role.py`).
"""
from fastapi import APIRouter, Depends, status

from storefront.deps import get_account_service
from storefront.schemas.user import LoginBody, RegisterBody, RegisterOut, TokenOut
from storefront.services.accounts import AccountService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterBody, svc: AccountService = Depends(get_account_service)):
    return RegisterOut(user=svc.register(payload))


@router.post("/login", response_model=TokenOut)
def login(payload: LoginBody, svc: AccountService = Depends(get_account_service)):
    return svc.login(payload)
