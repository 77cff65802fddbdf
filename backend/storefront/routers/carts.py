"""
storefront/routers/carts.py
Cart endpoints (owner or admin): add by product id, get full cart, remove one line, clear.

Behavior
- POST /cart/{user_id} checks the product exists (404 otherwise); adding a product that is
  already in the cart increments its quantity instead of adding a second line.
- GET /cart/{user_id} resolves every line against the catalog and returns name, image, price,
  subtotal per line and the cart total. 404 when the user has no cart.
"""
from fastapi import APIRouter, Depends, Response, status

from storefront.core.security import require_owner
from storefront.deps import get_cart_service
from storefront.schemas.cart import AddItemBody, CartOut, CartUpdatedOut
from storefront.schemas.principal import Identity
from storefront.services.carts import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.post("/{user_id}", response_model=CartUpdatedOut)
def add_to_cart(
    user_id: str,
    payload: AddItemBody,
    identity: Identity = Depends(require_owner),
    svc: CartService = Depends(get_cart_service),
):
    """Add a product to the user's cart."""
    cart = svc.add_item(user_id, payload.product_id, payload.quantity)
    return CartUpdatedOut(message="Product added to cart", cart=cart)


@router.get("/{user_id}", response_model=CartOut)
def get_cart(
    user_id: str,
    identity: Identity = Depends(require_owner),
    svc: CartService = Depends(get_cart_service),
):
    """Retrieve the user's cart with product details."""
    return svc.get(user_id)


@router.delete("/{user_id}/items/{product_id}", response_model=CartUpdatedOut)
def remove_cart_item(
    user_id: str,
    product_id: str,
    identity: Identity = Depends(require_owner),
    svc: CartService = Depends(get_cart_service),
):
    """Remove one line by its product id."""
    cart = svc.remove_item(user_id, product_id)
    return CartUpdatedOut(message="Product removed from cart", cart=cart)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(
    user_id: str,
    identity: Identity = Depends(require_owner),
    svc: CartService = Depends(get_cart_service),
):
    """Clear the entire cart."""
    svc.clear(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
