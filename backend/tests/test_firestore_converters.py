from datetime import datetime, timezone
from decimal import Decimal

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from storefront.repositories.firestore import (
    _cart_to_doc,
    _doc_to_cart,
    _doc_to_order,
    _doc_to_product,
    _order_to_doc,
)
from storefront.schemas.cart import Cart, CartLine
from storefront.schemas.order import Order, OrderLine, OrderStatus


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return self._data


def test_product_price_becomes_decimal():
    product = _doc_to_product(FakeSnapshot("P", {"name": "Keyboard", "price": 19.99, "category": "c1"}))

    assert product.price == Decimal("19.99")
    assert product.category_id == "c1"


def test_cart_drops_blank_and_zero_lines():
    snap = FakeSnapshot(
        "u1",
        {"items": [{"product_id": " P ", "quantity": 2}, {"product_id": "", "quantity": 1}, {"product_id": "Q", "quantity": 0}]},
    )

    cart = _doc_to_cart(snap)

    assert cart.user_id == "u1"
    assert [(line.product_id, line.quantity) for line in cart.items] == [("P", 2)]


def test_cart_doc_uses_server_timestamp():
    doc = _cart_to_doc(Cart(user_id="u1", items=[CartLine(product_id="P", quantity=3)]))

    assert doc["items"] == [{"product_id": "P", "quantity": 3}]
    assert doc["updated_at"] is SERVER_TIMESTAMP


def test_order_survives_document_round():
    created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    order = Order(
        id="o1",
        user_id="u1",
        items=[OrderLine(product_id="R", quantity=3, unit_price=Decimal("9.99"))],
        total_amount=Decimal("29.97"),
        status=OrderStatus.PAID,
        payment_authority="A1",
        payment_authorities=["A0", "A1"],
        payment_ref_id="77",
        created_at=created,
    )

    doc = _order_to_doc(order)
    doc["updated_at"] = created
    back = _doc_to_order(FakeSnapshot("o1", doc))

    assert doc["status"] == "paid"
    assert back.items[0].unit_price == Decimal("9.99")
    assert back.total_amount == Decimal("29.97")
    assert back.status is OrderStatus.PAID
    assert back.payment_ref_id == "77"
    assert back.payment_authorities == ["A0", "A1"]


def test_order_without_authorities_reads_as_empty_list():
    snap = FakeSnapshot("o2", {"user_id": "u1", "items": [], "total_amount": 0, "status": "pending"})

    assert _doc_to_order(snap).payment_authorities == []
