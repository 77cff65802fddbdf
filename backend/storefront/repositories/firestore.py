"""
storefront/repositories/firestore.py - Firestore-backed repositories.

Collections (prefix-aware via COLLECTION_PREFIX):
- carts/{user_id}            {user_id, items: [{product_id, quantity}], updated_at}
- orders/{order_id}          {user_id, items: [{product_id, quantity, unit_price}], total_amount, status, ...}
- products/{product_id}      read-only here
- users/{user_id}            {username, email, password_hash, role, created_at}
- discount_codes/{code}      {code, percentage, expires_at, created_at}

Read-modify-write paths (cart add/remove, checkout, order status) run inside
`@firestore.transactional` functions so concurrent requests for the same owner
are serialized by Firestore's optimistic concurrency.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists, FailedPrecondition
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, ArrayUnion
from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.config import Settings
from storefront.core.errors import ConflictError, NotFoundError, OrderStateError
from storefront.repositories.base import (
    CartRepository,
    DiscountRepository,
    OrderBuilder,
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from storefront.schemas.cart import Cart, CartLine
from storefront.schemas.discount import DiscountCode
from storefront.schemas.order import Order, OrderLine, OrderStatus, can_transition
from storefront.schemas.principal import Role
from storefront.schemas.product import Product
from storefront.schemas.user import User


# ---------- document <-> model ----------
def _money(value: Any) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _doc_to_product(snap) -> Product:
    d = snap.to_dict() or {}
    return Product(
        id=snap.id,
        name=d.get("name", ""),
        price=_money(d.get("price")),
        category_id=d.get("category") or d.get("category_id"),
        description=d.get("description", ""),
        image=d.get("image"),
    )


def _doc_to_cart(snap) -> Cart:
    d = snap.to_dict() or {}
    lines = []
    for it in d.get("items", []):
        pid = str(it.get("product_id", "")).strip()
        qty = int(it.get("quantity", 0) or 0)
        if pid and qty > 0:
            lines.append(CartLine(product_id=pid, quantity=qty))
    return Cart(user_id=snap.id, items=lines, updated_at=d.get("updated_at"))


def _cart_to_doc(cart: Cart) -> Dict[str, Any]:
    return {
        "user_id": cart.user_id,
        "items": [{"product_id": line.product_id, "quantity": line.quantity} for line in cart.items],
        "updated_at": SERVER_TIMESTAMP,
    }


def _order_to_doc(order: Order) -> Dict[str, Any]:
    return {
        "user_id": order.user_id,
        "items": [
            {"product_id": line.product_id, "quantity": line.quantity, "unit_price": float(line.unit_price)}
            for line in order.items
        ],
        "total_amount": float(order.total_amount),
        "status": order.status.value,
        "payment_authority": order.payment_authority,
        "payment_authorities": list(order.payment_authorities),
        "payment_ref_id": order.payment_ref_id,
        "created_at": order.created_at,
        "updated_at": SERVER_TIMESTAMP,
    }


def _doc_to_order(snap) -> Order:
    d = snap.to_dict() or {}
    return Order(
        id=snap.id,
        user_id=d.get("user_id", ""),
        items=[
            OrderLine(
                product_id=it.get("product_id", ""),
                quantity=int(it.get("quantity", 1)),
                unit_price=_money(it.get("unit_price")),
            )
            for it in d.get("items", [])
        ],
        total_amount=_money(d.get("total_amount")).quantize(Decimal("0.01")),
        status=OrderStatus(d.get("status", OrderStatus.PENDING.value)),
        payment_authority=d.get("payment_authority"),
        payment_authorities=list(d.get("payment_authorities") or []),
        payment_ref_id=d.get("payment_ref_id"),
        created_at=d.get("created_at") or datetime.now(timezone.utc),
        updated_at=d.get("updated_at"),
    )


def _doc_to_user(snap) -> User:
    d = snap.to_dict() or {}
    return User(
        id=snap.id,
        username=d.get("username", ""),
        email=d.get("email", ""),
        password_hash=d.get("password_hash", ""),
        role=Role(d.get("role", Role.CUSTOMER.value)),
        created_at=d.get("created_at"),
    )


def _doc_to_discount(snap) -> DiscountCode:
    d = snap.to_dict() or {}
    return DiscountCode(
        code=snap.id,
        percentage=float(d.get("percentage", 0)),
        expires_at=d.get("expires_at"),
        created_at=d.get("created_at"),
    )


# ---------- transactional units ----------
@firestore.transactional
def _add_item_in_transaction(transaction, cart_ref, product_id: str, quantity: int) -> Cart:
    snap = cart_ref.get(transaction=transaction)
    cart = _doc_to_cart(snap) if snap.exists else Cart(user_id=cart_ref.id)
    cart.add(product_id, quantity)
    transaction.set(cart_ref, _cart_to_doc(cart))
    return cart


@firestore.transactional
def _remove_item_in_transaction(transaction, cart_ref, product_id: str) -> Cart:
    snap = cart_ref.get(transaction=transaction)
    if not snap.exists:
        raise NotFoundError("Cart not found")
    cart = _doc_to_cart(snap)
    if not cart.remove(product_id):
        raise NotFoundError("Item not found in cart.")
    transaction.set(cart_ref, _cart_to_doc(cart))
    return cart


@firestore.transactional
def _place_in_transaction(transaction, db, cart_ref, orders_col, products_col, build: OrderBuilder) -> Order:
    """
    All reads happen before any write (Firestore transaction rule):
    cart, then its products, then order set + cart delete in one commit.
    """
    snap = cart_ref.get(transaction=transaction)
    cart = _doc_to_cart(snap) if snap.exists else None
    products: Dict[str, Product] = {}
    if cart is not None and cart.items:
        refs = [products_col.document(line.product_id) for line in cart.items]
        for psnap in db.get_all(refs, transaction=transaction):
            if psnap.exists:
                products[psnap.id] = _doc_to_product(psnap)
    order = build(cart, products)
    transaction.set(orders_col.document(order.id), _order_to_doc(order))
    transaction.delete(cart_ref)
    return order


@firestore.transactional
def _transition_in_transaction(transaction, order_ref, target: OrderStatus, payment_ref_id: Optional[str]) -> None:
    snap = order_ref.get(transaction=transaction)
    if not snap.exists:
        raise NotFoundError("Order not found")
    current = OrderStatus((snap.to_dict() or {}).get("status", OrderStatus.PENDING.value))
    if not can_transition(current, target):
        raise OrderStateError(f"Order is {current.value}; cannot become {target.value}")
    patch: Dict[str, Any] = {"status": target.value, "updated_at": SERVER_TIMESTAMP}
    if payment_ref_id is not None:
        patch["payment_ref_id"] = payment_ref_id
    transaction.update(order_ref, patch)


@firestore.transactional
def _create_user_in_transaction(transaction, users_col, user: User) -> None:
    existing = list(
        users_col.where(filter=FieldFilter("email", "==", user.email)).limit(1).stream(transaction=transaction)
    )
    if existing:
        raise ConflictError("User already exists")
    transaction.set(
        users_col.document(user.id),
        {
            "username": user.username,
            "email": user.email,
            "password_hash": user.password_hash,
            "role": user.role.value,
            "created_at": SERVER_TIMESTAMP,
        },
    )


# ---------- repositories ----------
class FirestoreProductRepository(ProductRepository):
    def __init__(self, db, settings: Settings):
        self.db = db
        self.col = db.collection(settings.collection("products"))

    def get(self, product_id: str) -> Optional[Product]:
        snap = self.col.document(product_id).get()
        return _doc_to_product(snap) if snap.exists else None

    def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        refs = [self.col.document(pid) for pid in set(product_ids) if pid]
        if not refs:
            return {}
        return {snap.id: _doc_to_product(snap) for snap in self.db.get_all(refs) if snap.exists}


class FirestoreCartRepository(CartRepository):
    def __init__(self, db, settings: Settings):
        self.db = db
        self.col = db.collection(settings.collection("carts"))

    def get(self, user_id: str) -> Optional[Cart]:
        snap = self.col.document(user_id).get()
        return _doc_to_cart(snap) if snap.exists else None

    def add_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        return _add_item_in_transaction(self.db.transaction(), self.col.document(user_id), product_id, quantity)

    def remove_item(self, user_id: str, product_id: str) -> Cart:
        return _remove_item_in_transaction(self.db.transaction(), self.col.document(user_id), product_id)

    def delete(self, user_id: str) -> None:
        self.col.document(user_id).delete()


class FirestoreOrderRepository(OrderRepository):
    def __init__(self, db, settings: Settings):
        self.db = db
        self.col = db.collection(settings.collection("orders"))
        self.carts = db.collection(settings.collection("carts"))
        self.products = db.collection(settings.collection("products"))

    def place_from_cart(self, user_id: str, build: OrderBuilder) -> Order:
        return _place_in_transaction(
            self.db.transaction(), self.db, self.carts.document(user_id), self.col, self.products, build
        )

    def get(self, order_id: str) -> Optional[Order]:
        snap = self.col.document(order_id).get()
        return _doc_to_order(snap) if snap.exists else None

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Order]:
        base = self.col.where(filter=FieldFilter("user_id", "==", user_id))
        # Index present: fast path
        try:
            q = base.order_by("created_at", direction=firestore.Query.DESCENDING)
            if limit is not None:
                q = q.limit(limit)
            return [_doc_to_order(doc) for doc in q.stream()]
        except FailedPrecondition:
            # No composite index: unordered query + sort in Python
            orders = sorted((_doc_to_order(doc) for doc in base.stream()), key=lambda o: o.created_at, reverse=True)
            return orders[:limit] if limit is not None else orders

    def list_all(self) -> List[Order]:
        q = self.col.order_by("created_at", direction=firestore.Query.DESCENDING).stream()
        return [_doc_to_order(doc) for doc in q]

    def find_by_authority(self, authority: str) -> Optional[Order]:
        q = self.col.where(filter=FieldFilter("payment_authorities", "array_contains", authority)).limit(1).stream()
        for doc in q:
            return _doc_to_order(doc)
        return None

    def set_authority(self, order_id: str, authority: str) -> Order:
        ref = self.col.document(order_id)
        if not ref.get().exists:
            raise NotFoundError("Order not found")
        ref.update({
            "payment_authority": authority,
            "payment_authorities": ArrayUnion([authority]),
            "updated_at": SERVER_TIMESTAMP,
        })
        return _doc_to_order(ref.get())

    def transition(self, order_id: str, target: OrderStatus, payment_ref_id: Optional[str] = None) -> Order:
        ref = self.col.document(order_id)
        _transition_in_transaction(self.db.transaction(), ref, target, payment_ref_id)
        return _doc_to_order(ref.get())


class FirestoreUserRepository(UserRepository):
    def __init__(self, db, settings: Settings):
        self.db = db
        self.col = db.collection(settings.collection("users"))

    def get(self, user_id: str) -> Optional[User]:
        snap = self.col.document(user_id).get()
        return _doc_to_user(snap) if snap.exists else None

    def find_by_email(self, email: str) -> Optional[User]:
        q = self.col.where(filter=FieldFilter("email", "==", email.strip().lower())).limit(1).stream()
        for doc in q:
            return _doc_to_user(doc)
        return None

    def create(self, user: User) -> User:
        user = user.model_copy(update={"id": user.id or uuid.uuid4().hex, "email": user.email.strip().lower()})
        _create_user_in_transaction(self.db.transaction(), self.col, user)
        return _doc_to_user(self.col.document(user.id).get())

    def set_role(self, user_id: str, role: Role) -> User:
        ref = self.col.document(user_id)
        if not ref.get().exists:
            raise NotFoundError("User not found")
        ref.update({"role": role.value})
        return _doc_to_user(ref.get())


class FirestoreDiscountRepository(DiscountRepository):
    def __init__(self, db, settings: Settings):
        self.col = db.collection(settings.collection("discount_codes"))

    def create(self, discount: DiscountCode) -> DiscountCode:
        ref = self.col.document(discount.code)
        try:
            ref.create({
                "code": discount.code,
                "percentage": discount.percentage,
                "expires_at": discount.expires_at,
                "created_at": SERVER_TIMESTAMP,
            })
        except AlreadyExists:
            raise ConflictError("Discount code already exists")
        return _doc_to_discount(ref.get())

    def get(self, code: str) -> Optional[DiscountCode]:
        snap = self.col.document(code).get()
        return _doc_to_discount(snap) if snap.exists else None

    def list(self) -> List[DiscountCode]:
        return [_doc_to_discount(doc) for doc in self.col.stream()]

    def delete(self, code: str) -> bool:
        ref = self.col.document(code)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
