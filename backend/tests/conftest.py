from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.core.tokens import issue_token
from storefront.integrations.payment import FakeGateway
from storefront.main import create_app
from storefront.repositories import MemoryStore, memory_stores
from storefront.schemas.principal import Role
from storefront.schemas.product import Product

SECRET = "test-secret-0123456789abcdef"


@pytest.fixture()
def settings():
    return Settings(jwt_secret=SECRET, store_backend="memory", log_level="WARNING", _env_file=None)


@pytest.fixture()
def store():
    store = MemoryStore()
    store.add_product(Product(id="P", name="Keyboard", price=Decimal("100"), image="https://img/p.png"))
    store.add_product(Product(id="Q", name="Mouse", price=Decimal("50")))
    store.add_product(Product(id="R", name="Cable", price=Decimal("9.99")))
    return store


@pytest.fixture()
def stores(store):
    return memory_stores(store)


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def client(settings, stores, gateway):
    app = create_app(settings=settings, stores=stores, gateway=gateway)
    return TestClient(app)


@pytest.fixture()
def make_headers(settings):
    def _make(subject: str = "u1", role: Role = Role.CUSTOMER) -> dict:
        return {"Authorization": f"Bearer {issue_token(subject, role, settings)}"}

    return _make


@pytest.fixture()
def customer(make_headers):
    return make_headers("u1", Role.CUSTOMER)


@pytest.fixture()
def admin(make_headers):
    return make_headers("boss", Role.ADMIN)
