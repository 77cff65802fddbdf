"""Repository contracts for the document store collaborators.

Two implementations exist: Firestore (production) and an in-process memory
store (local development and tests). Routers and services only see these
interfaces.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional

from storefront.schemas.cart import Cart
from storefront.schemas.discount import DiscountCode
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.principal import Role
from storefront.schemas.product import Product
from storefront.schemas.user import User

# Called inside the checkout unit with the owner's cart (or None) and its
# resolved products. Returns the order to persist or raises to abort.
OrderBuilder = Callable[[Optional[Cart], Dict[str, Product]], Order]


class ProductRepository(ABC):
    @abstractmethod
    def get(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Products keyed by id; missing ids are absent from the result."""
        ...


class CartRepository(ABC):
    @abstractmethod
    def get(self, user_id: str) -> Optional[Cart]:
        ...

    @abstractmethod
    def add_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        """Create the cart if needed; an existing line has its quantity incremented."""
        ...

    @abstractmethod
    def remove_item(self, user_id: str, product_id: str) -> Cart:
        """Raises NotFoundError when the cart or the line does not exist."""
        ...

    @abstractmethod
    def delete(self, user_id: str) -> None:
        ...


class OrderRepository(ABC):
    @abstractmethod
    def place_from_cart(self, user_id: str, build: OrderBuilder) -> Order:
        """
        Atomically read the owner's cart, persist the order returned by
        `build`, then delete the cart. If `build` raises or the order write
        fails, the cart is left untouched.
        """
        ...

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        ...

    @abstractmethod
    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Order]:
        """Newest first."""
        ...

    @abstractmethod
    def list_all(self) -> List[Order]:
        ...

    @abstractmethod
    def find_by_authority(self, authority: str) -> Optional[Order]:
        """Matches any authority ever issued for the order, not only the latest."""
        ...

    @abstractmethod
    def set_authority(self, order_id: str, authority: str) -> Order:
        """Records a newly issued authority; earlier ones stay valid for lookup."""
        ...

    @abstractmethod
    def transition(self, order_id: str, target: OrderStatus, payment_ref_id: Optional[str] = None) -> Order:
        """Apply a status transition; raises NotFoundError / OrderStateError."""
        ...


class UserRepository(ABC):
    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def create(self, user: User) -> User:
        """Raises ConflictError if the email is already registered."""
        ...

    @abstractmethod
    def set_role(self, user_id: str, role: Role) -> User:
        ...


class DiscountRepository(ABC):
    @abstractmethod
    def create(self, discount: DiscountCode) -> DiscountCode:
        """Raises ConflictError if the code already exists."""
        ...

    @abstractmethod
    def get(self, code: str) -> Optional[DiscountCode]:
        ...

    @abstractmethod
    def list(self) -> List[DiscountCode]:
        ...

    @abstractmethod
    def delete(self, code: str) -> bool:
        ...
