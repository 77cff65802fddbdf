# storefront/deps.py
from fastapi import Depends, Request

from storefront.config import Settings
from storefront.core.auth import get_app_settings
from storefront.integrations.payment import PaymentGateway
from storefront.repositories import Stores
from storefront.services.accounts import AccountService
from storefront.services.carts import CartService
from storefront.services.checkout import CheckoutService
from storefront.services.payments import PaymentService


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_cart_service(stores: Stores = Depends(get_stores)) -> CartService:
    return CartService(stores)


def get_checkout_service(stores: Stores = Depends(get_stores)) -> CheckoutService:
    return CheckoutService(stores)


def get_payment_service(
    stores: Stores = Depends(get_stores), gateway: PaymentGateway = Depends(get_gateway)
) -> PaymentService:
    return PaymentService(stores, gateway)


def get_account_service(
    stores: Stores = Depends(get_stores), settings: Settings = Depends(get_app_settings)
) -> AccountService:
    return AccountService(stores, settings)
