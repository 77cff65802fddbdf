"""
storefront/core/security.py - Role Gate.

Runs after the credential verifier (`core.auth.get_identity`) on every privileged
route. Stateless: decisions use only the Identity, never the store.

- `authorize(identity, required)`: absent → UNAUTHENTICATED, wrong role → FORBIDDEN.
- `authorize_owner(identity, user_id)`: per-user resources are open to their owner and admins.
- `require_role(role)` / `require_admin`: FastAPI dependency wrappers.
"""
from typing import Callable, Optional

from fastapi import Depends

from storefront.core.auth import get_identity, get_optional_identity
from storefront.core.errors import AuthError, AuthErrorKind
from storefront.schemas.principal import Identity, Role


def authorize(identity: Optional[Identity], required: Role) -> Identity:
    if identity is None:
        raise AuthError(AuthErrorKind.UNAUTHENTICATED)
    if identity.role is not required:
        raise AuthError(AuthErrorKind.FORBIDDEN)
    return identity


def authorize_owner(identity: Optional[Identity], user_id: str) -> Identity:
    if identity is None:
        raise AuthError(AuthErrorKind.UNAUTHENTICATED)
    if identity.subject != user_id and not identity.is_admin:
        raise AuthError(AuthErrorKind.FORBIDDEN, "Access denied to another user's resources")
    return identity


def require_role(role: Role) -> Callable[..., Identity]:
    def _dependency(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
        return authorize(identity, role)

    return _dependency


require_admin = require_role(Role.ADMIN)


def require_owner(user_id: str, identity: Identity = Depends(get_identity)) -> Identity:
    """
    Dependency for routes with a `{user_id}` path parameter.
    FastAPI fills `user_id` from the path.
    """
    return authorize_owner(identity, user_id)
