# storefront/core/auth.py
from typing import Optional

from fastapi import Depends, Request

from storefront.config import Settings
from storefront.core.errors import AuthError, AuthErrorKind
from storefront.core.tokens import verify_token
from storefront.schemas.principal import Identity


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Reads the token from `Authorization: Bearer <token>`.
    Returns None when the header is absent or uses another scheme.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# --------- FastAPI Dependencies --------- #

async def get_optional_identity(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> Optional[Identity]:
    """
    Token optional: verified when present, None otherwise.
    A present but broken token is still rejected.
    """
    token = _extract_bearer_token(request)
    if not token:
        return None
    return verify_token(token, settings)


async def get_identity(request: Request, settings: Settings = Depends(get_app_settings)) -> Identity:
    """Token required: verifies it and returns the caller's Identity."""
    token = _extract_bearer_token(request)
    if not token:
        raise AuthError(AuthErrorKind.MISSING)
    return verify_token(token, settings)
