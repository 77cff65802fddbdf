"""
storefront/services/carts.py - Cart operations.

- add_item verifies the product exists (404 otherwise) and merges quantities.
- view resolves each line against the catalog: price, name, image, subtotal.
  Lines whose product vanished are kept and flagged `unresolved` so bad ids are visible.
"""
import logging
from decimal import Decimal

from storefront.core.errors import NotFoundError
from storefront.repositories import Stores
from storefront.schemas.cart import Cart, CartLineOut, CartOut

logger = logging.getLogger("storefront.carts")


class CartService:
    def __init__(self, stores: Stores):
        self.stores = stores

    def add_item(self, user_id: str, product_id: str, quantity: int) -> CartOut:
        if self.stores.products.get(product_id) is None:
            raise NotFoundError("Product not found")
        cart = self.stores.carts.add_item(user_id, product_id, quantity)
        logger.info("cart %s: +%d x %s", user_id, quantity, product_id)
        return self.view(cart)

    def get(self, user_id: str) -> CartOut:
        cart = self.stores.carts.get(user_id)
        if cart is None:
            raise NotFoundError("Cart not found")
        return self.view(cart)

    def remove_item(self, user_id: str, product_id: str) -> CartOut:
        return self.view(self.stores.carts.remove_item(user_id, product_id))

    def clear(self, user_id: str) -> None:
        self.stores.carts.delete(user_id)

    def view(self, cart: Cart) -> CartOut:
        catalog = self.stores.products.get_many(line.product_id for line in cart.items)
        items = []
        total_qty = 0
        total = Decimal("0")
        for line in cart.items:
            product = catalog.get(line.product_id)
            if product is None:
                items.append(CartLineOut(product_id=line.product_id, quantity=line.quantity, unresolved=True))
                continue
            subtotal = product.price * line.quantity
            total_qty += line.quantity
            total += subtotal
            items.append(
                CartLineOut(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    product=product.summary(),
                    subtotal=float(subtotal),
                )
            )
        return CartOut(user_id=cart.user_id, items=items, total_quantity=total_qty, total_amount=float(total))
