"""
# `storefront/main.py` - Application entry point

## Overview
Builds the FastAPI application: configuration, logging, document store,
payment gateway, error handlers and routers.

---

## Startup
- `Settings` is loaded once (`get_settings()`) unless one is passed in.
- The store backend comes from `STORE_BACKEND` (`firestore` | `memory`).
- The gateway is Zarinpal when `ZARINPAL_MERCHANT_ID` is set, otherwise the fake gateway.
- All three live on `app.state`; request handlers reach them through `storefront.deps`.

---

## Routers
**Public:** `/auth`, `/cart`, `/orders`, `/payment`

**Admin (prefix `/admin`, role-gated):** `/orders`, `/discounts`
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import Settings, get_settings
from storefront.core.errors import register_exception_handlers
from storefront.integrations.payment import PaymentGateway, build_gateway
from storefront.repositories import Stores, build_stores
from storefront.routers import auth, carts, discounts, orders, payment

logger = logging.getLogger("storefront")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    stores: Optional[Stores] = None,
    gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Storefront API",
        description="Accounts, cart, checkout, orders, discount codes and payments for an online store.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.stores = stores or build_stores(settings)
    app.state.gateway = gateway or build_gateway(settings)

    # Configure CORS (allow front-end domain or all origins as specified)
    allow_origins = (
        [origin.strip() for origin in settings.allowed_origins.split(",")] if settings.allowed_origins else ["*"]
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Public routers
    app.include_router(auth.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(payment.router)

    # Admin routers (with prefix /admin)
    app.include_router(orders.admin_router, prefix="/admin")
    app.include_router(discounts.router, prefix="/admin")

    @app.get("/", include_in_schema=False)
    def root():
        return {"message": "Welcome to the Storefront API"}

    logger.info("storefront started (store=%s)", settings.store_backend)
    return app


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
