"""
storefront/core/errors.py - Error taxonomy and its HTTP mapping.

Every error leaves the API as a JSON object with a `message` field:
- AuthError      → 401 (missing/invalid/unauthenticated) or 403 (forbidden)
- CheckoutError  → 400 for caller-fixable conditions, 500 for storage faults
- PaymentError   → 400 when the gateway rejects, 500 on transport failure;
                   the upstream payload is attached as `error`
- OrderStateError, NotFoundError, ConflictError → 409 / 404 / 409
"""
import enum
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger("storefront.errors")


class StorefrontError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"message": self.message}


class AuthErrorKind(str, enum.Enum):
    MISSING = "missing"
    INVALID = "invalid"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


_AUTH_MESSAGES = {
    AuthErrorKind.MISSING: "Access denied. No token provided.",
    AuthErrorKind.INVALID: "Invalid token.",
    AuthErrorKind.UNAUTHENTICATED: "Unauthorized: User not authenticated",
    AuthErrorKind.FORBIDDEN: "Unauthorized access: Admin only",
}


class AuthError(StorefrontError):
    def __init__(self, kind: AuthErrorKind, message: Optional[str] = None):
        super().__init__(message or _AUTH_MESSAGES[kind])
        self.kind = kind
        self.status_code = (
            status.HTTP_403_FORBIDDEN if kind is AuthErrorKind.FORBIDDEN else status.HTTP_401_UNAUTHORIZED
        )


class CheckoutErrorKind(str, enum.Enum):
    EMPTY_CART = "empty_cart"
    PRODUCT_MISSING = "product_missing"
    PERSISTENCE_FAILURE = "persistence_failure"


class CheckoutError(StorefrontError):
    def __init__(self, kind: CheckoutErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.status_code = (
            status.HTTP_500_INTERNAL_SERVER_ERROR
            if kind is CheckoutErrorKind.PERSISTENCE_FAILURE
            else status.HTTP_400_BAD_REQUEST
        )

    @classmethod
    def empty_cart(cls) -> "CheckoutError":
        return cls(CheckoutErrorKind.EMPTY_CART, "Cart is empty")


class PaymentErrorKind(str, enum.Enum):
    GATEWAY_REJECTED = "gateway_rejected"
    NETWORK_FAILURE = "network_failure"


class PaymentError(StorefrontError):
    def __init__(self, kind: PaymentErrorKind, message: str, upstream: Any = None):
        super().__init__(message)
        self.kind = kind
        self.upstream = upstream
        self.status_code = (
            status.HTTP_400_BAD_REQUEST
            if kind is PaymentErrorKind.GATEWAY_REJECTED
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    def to_body(self) -> dict:
        body = super().to_body()
        if self.upstream is not None:
            body["error"] = self.upstream
        return body


class OrderStateError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT


# ---------- handlers ----------
async def _storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthError) and exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, _storefront_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
