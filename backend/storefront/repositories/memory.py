"""In-process document store.

Selected with STORE_BACKEND=memory for local development without Firebase
credentials, and used by the test suite. One re-entrant lock guards every
collection, which gives the checkout unit the same all-or-nothing behaviour
as a Firestore transaction.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from storefront.core.errors import ConflictError, NotFoundError, OrderStateError
from storefront.repositories.base import (
    CartRepository,
    DiscountRepository,
    OrderBuilder,
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from storefront.schemas.cart import Cart
from storefront.schemas.discount import DiscountCode
from storefront.schemas.order import Order, OrderStatus, can_transition
from storefront.schemas.principal import Role
from storefront.schemas.product import Product
from storefront.schemas.user import User


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStore:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.products: Dict[str, Product] = {}
        self.carts: Dict[str, Cart] = {}
        self.orders: Dict[str, Order] = {}
        self.users: Dict[str, User] = {}
        self.discounts: Dict[str, DiscountCode] = {}

    def add_product(self, product: Product) -> Product:
        with self.lock:
            self.products[product.id] = product.model_copy(deep=True)
        return product


class MemoryProductRepository(ProductRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def get(self, product_id: str) -> Optional[Product]:
        with self.store.lock:
            product = self.store.products.get(product_id)
            return product.model_copy(deep=True) if product else None

    def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        with self.store.lock:
            return {
                pid: self.store.products[pid].model_copy(deep=True)
                for pid in set(product_ids)
                if pid in self.store.products
            }


class MemoryCartRepository(CartRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def get(self, user_id: str) -> Optional[Cart]:
        with self.store.lock:
            cart = self.store.carts.get(user_id)
            return cart.model_copy(deep=True) if cart else None

    def add_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        with self.store.lock:
            cart = self.store.carts.get(user_id) or Cart(user_id=user_id)
            cart = cart.model_copy(deep=True)
            cart.add(product_id, quantity)
            cart.updated_at = _now()
            self.store.carts[user_id] = cart
            return cart.model_copy(deep=True)

    def remove_item(self, user_id: str, product_id: str) -> Cart:
        with self.store.lock:
            cart = self.store.carts.get(user_id)
            if cart is None:
                raise NotFoundError("Cart not found")
            cart = cart.model_copy(deep=True)
            if not cart.remove(product_id):
                raise NotFoundError("Item not found in cart.")
            cart.updated_at = _now()
            self.store.carts[user_id] = cart
            return cart.model_copy(deep=True)

    def delete(self, user_id: str) -> None:
        with self.store.lock:
            self.store.carts.pop(user_id, None)


class MemoryOrderRepository(OrderRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def _save_order(self, order: Order) -> None:
        self.store.orders[order.id] = order.model_copy(deep=True)

    def place_from_cart(self, user_id: str, build: OrderBuilder) -> Order:
        with self.store.lock:
            cart = self.store.carts.get(user_id)
            cart = cart.model_copy(deep=True) if cart else None
            products: Dict[str, Product] = {}
            if cart is not None:
                products = {
                    line.product_id: self.store.products[line.product_id].model_copy(deep=True)
                    for line in cart.items
                    if line.product_id in self.store.products
                }
            order = build(cart, products)
            # order first: a failed write must leave the cart in place
            self._save_order(order)
            self.store.carts.pop(user_id, None)
            return order.model_copy(deep=True)

    def get(self, order_id: str) -> Optional[Order]:
        with self.store.lock:
            order = self.store.orders.get(order_id)
            return order.model_copy(deep=True) if order else None

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Order]:
        with self.store.lock:
            orders = sorted(
                (o for o in self.store.orders.values() if o.user_id == user_id),
                key=lambda o: o.created_at,
                reverse=True,
            )
            if limit is not None:
                orders = orders[:limit]
            return [o.model_copy(deep=True) for o in orders]

    def list_all(self) -> List[Order]:
        with self.store.lock:
            orders = sorted(self.store.orders.values(), key=lambda o: o.created_at, reverse=True)
            return [o.model_copy(deep=True) for o in orders]

    def find_by_authority(self, authority: str) -> Optional[Order]:
        with self.store.lock:
            for order in self.store.orders.values():
                if authority in order.payment_authorities or order.payment_authority == authority:
                    return order.model_copy(deep=True)
        return None

    def set_authority(self, order_id: str, authority: str) -> Order:
        with self.store.lock:
            order = self.store.orders.get(order_id)
            if order is None:
                raise NotFoundError("Order not found")
            authorities = [a for a in order.payment_authorities if a != authority] + [authority]
            order = order.model_copy(
                update={"payment_authority": authority, "payment_authorities": authorities, "updated_at": _now()}
            )
            self._save_order(order)
            return order.model_copy(deep=True)

    def transition(self, order_id: str, target: OrderStatus, payment_ref_id: Optional[str] = None) -> Order:
        with self.store.lock:
            order = self.store.orders.get(order_id)
            if order is None:
                raise NotFoundError("Order not found")
            if not can_transition(order.status, target):
                raise OrderStateError(f"Order is {order.status.value}; cannot become {target.value}")
            update = {"status": target, "updated_at": _now()}
            if payment_ref_id is not None:
                update["payment_ref_id"] = payment_ref_id
            order = order.model_copy(update=update)
            self._save_order(order)
            return order.model_copy(deep=True)


class MemoryUserRepository(UserRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def get(self, user_id: str) -> Optional[User]:
        with self.store.lock:
            user = self.store.users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def find_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        with self.store.lock:
            for user in self.store.users.values():
                if user.email == email:
                    return user.model_copy(deep=True)
        return None

    def create(self, user: User) -> User:
        user = user.model_copy(update={"email": user.email.strip().lower(), "created_at": user.created_at or _now()})
        with self.store.lock:
            if any(u.email == user.email for u in self.store.users.values()):
                raise ConflictError("User already exists")
            self.store.users[user.id] = user
            return user.model_copy(deep=True)

    def set_role(self, user_id: str, role: Role) -> User:
        with self.store.lock:
            user = self.store.users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            user = user.model_copy(update={"role": role})
            self.store.users[user_id] = user
            return user.model_copy(deep=True)


class MemoryDiscountRepository(DiscountRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def create(self, discount: DiscountCode) -> DiscountCode:
        discount = discount.model_copy(update={"created_at": discount.created_at or _now()})
        with self.store.lock:
            if discount.code in self.store.discounts:
                raise ConflictError("Discount code already exists")
            self.store.discounts[discount.code] = discount
            return discount.model_copy(deep=True)

    def get(self, code: str) -> Optional[DiscountCode]:
        with self.store.lock:
            discount = self.store.discounts.get(code)
            return discount.model_copy(deep=True) if discount else None

    def list(self) -> List[DiscountCode]:
        with self.store.lock:
            return [d.model_copy(deep=True) for d in self.store.discounts.values()]

    def delete(self, code: str) -> bool:
        with self.store.lock:
            return self.store.discounts.pop(code, None) is not None
