from dataclasses import dataclass
from typing import Optional

from storefront.config import Settings, init_firestore
from storefront.repositories.base import (
    CartRepository,
    DiscountRepository,
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from storefront.repositories.memory import (
    MemoryCartRepository,
    MemoryDiscountRepository,
    MemoryOrderRepository,
    MemoryProductRepository,
    MemoryStore,
    MemoryUserRepository,
)


@dataclass
class Stores:
    products: ProductRepository
    carts: CartRepository
    orders: OrderRepository
    users: UserRepository
    discounts: DiscountRepository


def memory_stores(store: Optional[MemoryStore] = None) -> Stores:
    store = store or MemoryStore()
    return Stores(
        products=MemoryProductRepository(store),
        carts=MemoryCartRepository(store),
        orders=MemoryOrderRepository(store),
        users=MemoryUserRepository(store),
        discounts=MemoryDiscountRepository(store),
    )


def firestore_stores(settings: Settings, db=None) -> Stores:
    from storefront.repositories.firestore import (
        FirestoreCartRepository,
        FirestoreDiscountRepository,
        FirestoreOrderRepository,
        FirestoreProductRepository,
        FirestoreUserRepository,
    )

    db = db or init_firestore(settings)
    return Stores(
        products=FirestoreProductRepository(db, settings),
        carts=FirestoreCartRepository(db, settings),
        orders=FirestoreOrderRepository(db, settings),
        users=FirestoreUserRepository(db, settings),
        discounts=FirestoreDiscountRepository(db, settings),
    )


def build_stores(settings: Settings) -> Stores:
    if settings.store_backend == "memory":
        return memory_stores()
    return firestore_stores(settings)


__all__ = ["Stores", "build_stores", "memory_stores", "firestore_stores", "MemoryStore"]
