"""
storefront/core/tokens.py - Bearer token issue and verification.

Tokens are HS256 JWTs carrying `sub` (user id) and `role`, signed with the
configured secret and valid for `token_ttl_seconds` (one hour by default).
Verification is a pure function of token, secret and clock: no store access.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from storefront.config import Settings
from storefront.core.errors import AuthError, AuthErrorKind
from storefront.schemas.principal import Identity, Role


def issue_token(subject: str, role: Role, settings: Settings, now: Optional[datetime] = None) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "role": Role(role).value,
        "iat": issued,
        "exp": issued + timedelta(seconds=settings.token_ttl_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> Identity:
    """
    Decode and validate a bearer token.
    Bad signature, malformed token and expiry all surface as AuthError(INVALID).
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError(AuthErrorKind.INVALID, "Token expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError(AuthErrorKind.INVALID) from exc

    try:
        role = Role(claims.get("role"))
    except ValueError as exc:
        raise AuthError(AuthErrorKind.INVALID, "Token missing role.") from exc
    return Identity(subject=str(claims["sub"]), role=role)
