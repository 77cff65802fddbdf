"""
storefront/routers/orders.py
- Public (owner or admin): place an order from the cart, latest order, order history
- Admin: /admin/orders → list every order, cancel a pending order
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from storefront.core.security import require_admin, require_owner
from storefront.deps import get_checkout_service
from storefront.schemas.order import OrderOut, OrderPlacedOut
from storefront.schemas.principal import Identity
from storefront.services.checkout import CheckoutService

router = APIRouter(prefix="/orders", tags=["Orders"])
admin_router = APIRouter(prefix="/orders", tags=["Admin Orders"], dependencies=[Depends(require_admin)])


@router.post("/{user_id}", response_model=OrderPlacedOut, status_code=status.HTTP_201_CREATED)
def place_order(
    user_id: str,
    identity: Identity = Depends(require_owner),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Turns the user's cart into a pending order and deletes the cart.
    400 "Cart is empty" when there is nothing to check out.
    """
    order = svc.checkout(user_id)
    return OrderPlacedOut(order=svc.to_out(order))


@router.get("/{user_id}", response_model=Optional[OrderOut])
def get_latest_order(
    user_id: str,
    identity: Identity = Depends(require_owner),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """Most recent order of the user (null when there is none)."""
    return svc.get_orders(user_id)


@router.get("/{user_id}/history", response_model=List[OrderOut])
def list_user_orders(
    user_id: str,
    identity: Identity = Depends(require_owner),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """All orders of the user, newest first."""
    return svc.list_orders(user_id)


@admin_router.get("", response_model=List[OrderOut])
def admin_list_orders(svc: CheckoutService = Depends(get_checkout_service)):
    return svc.list_all_orders()


@admin_router.post("/{order_id}/cancel", response_model=OrderOut)
def admin_cancel_order(order_id: str, svc: CheckoutService = Depends(get_checkout_service)):
    """Cancels a pending order. Paid, failed or cancelled orders are left as they are (409)."""
    return svc.cancel_order(order_id)
