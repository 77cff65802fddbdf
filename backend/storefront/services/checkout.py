"""
storefront/services/checkout.py - Cart → Order checkout and order retrieval.

checkout(user_id):
    1. read the owner's cart with its products resolved
    2. copy each line into an OrderLine, capturing the current unit price
    3. total = Σ quantity × unit price
    4. persist the order as `pending`
    5. delete the cart
Steps 1-5 run as one unit in the order repository (Firestore transaction /
memory lock). The order is written before the cart is deleted, so a failed
write never loses the cart, and a concurrent second checkout finds no cart.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from storefront.core.errors import (
    CheckoutError,
    CheckoutErrorKind,
    NotFoundError,
    StorefrontError,
)
from storefront.repositories import Stores
from storefront.schemas.cart import Cart
from storefront.schemas.order import (
    Order,
    OrderLine,
    OrderLineOut,
    OrderOut,
    OrderStatus,
    order_total,
)
from storefront.schemas.product import Product

logger = logging.getLogger("storefront.checkout")


def build_order(user_id: str, cart: Optional[Cart], products: Dict[str, Product]) -> Order:
    if cart is None or not cart.items:
        raise CheckoutError.empty_cart()

    missing = [line.product_id for line in cart.items if line.product_id not in products]
    if missing:
        raise CheckoutError(
            CheckoutErrorKind.PRODUCT_MISSING,
            f"Products no longer available: {', '.join(missing)}",
        )

    lines = [
        OrderLine(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=products[line.product_id].price,
        )
        for line in cart.items
    ]
    return Order(
        id=uuid.uuid4().hex,
        user_id=user_id,
        items=lines,
        total_amount=order_total(lines),
        status=OrderStatus.PENDING,
        created_at=datetime.now(timezone.utc),
    )


class CheckoutService:
    def __init__(self, stores: Stores):
        self.stores = stores

    def checkout(self, user_id: str) -> Order:
        try:
            order = self.stores.orders.place_from_cart(user_id, lambda cart, products: build_order(user_id, cart, products))
        except StorefrontError:
            raise
        except Exception as exc:
            logger.exception("checkout for %s failed while persisting", user_id)
            raise CheckoutError(CheckoutErrorKind.PERSISTENCE_FAILURE, "Error placing order") from exc
        logger.info("order %s placed for %s: %d lines, total %s", order.id, user_id, len(order.items), order.total_amount)
        return order

    # ---------- retrieval ----------
    def get_orders(self, user_id: str) -> Optional[OrderOut]:
        """Most recent order for the owner, or None."""
        orders = self.stores.orders.list_for_user(user_id, limit=1)
        return self.to_out(orders[0]) if orders else None

    def list_orders(self, user_id: str) -> List[OrderOut]:
        return self.to_many(self.stores.orders.list_for_user(user_id))

    def get_order(self, order_id: str) -> Order:
        order = self.stores.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def list_all_orders(self) -> List[OrderOut]:
        return self.to_many(self.stores.orders.list_all())

    def cancel_order(self, order_id: str) -> OrderOut:
        order = self.stores.orders.transition(order_id, OrderStatus.CANCELLED)
        logger.info("order %s cancelled", order_id)
        return self.to_out(order)

    # ---------- display ----------
    def to_many(self, orders: List[Order]) -> List[OrderOut]:
        catalog = self.stores.products.get_many(line.product_id for o in orders for line in o.items)
        return [self._render(o, catalog) for o in orders]

    def to_out(self, order: Order) -> OrderOut:
        catalog = self.stores.products.get_many(line.product_id for line in order.items)
        return self._render(order, catalog)

    @staticmethod
    def _render(order: Order, catalog: Dict[str, Product]) -> OrderOut:
        items = []
        for line in order.items:
            product = catalog.get(line.product_id)
            items.append(
                OrderLineOut(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=float(line.unit_price),
                    line_total=float(line.line_total),
                    product=product.summary() if product else None,
                )
            )
        return OrderOut(
            id=order.id,
            user_id=order.user_id,
            items=items,
            total_amount=float(order.total_amount),
            status=order.status,
            payment_ref_id=order.payment_ref_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
