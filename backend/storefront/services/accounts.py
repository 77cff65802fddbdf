"""
storefront/services/accounts.py - Registration and password login.

Login issues a bearer token carrying the user's id and role; the token is the
only thing later requests rely on (no per-request user lookup).
"""
import logging
import uuid

from storefront.config import Settings
from storefront.core.errors import NotFoundError, StorefrontError
from storefront.core.passwords import hash_password, verify_password
from storefront.core.tokens import issue_token
from storefront.repositories import Stores
from storefront.schemas.principal import Role
from storefront.schemas.user import LoginBody, RegisterBody, TokenOut, User, UserOut

logger = logging.getLogger("storefront.accounts")


class InvalidCredentials(StorefrontError):
    status_code = 400


class AccountService:
    def __init__(self, stores: Stores, settings: Settings):
        self.stores = stores
        self.settings = settings

    def register(self, body: RegisterBody) -> UserOut:
        user = self.stores.users.create(
            User(
                id=uuid.uuid4().hex,
                username=body.username,
                email=str(body.email),
                password_hash=hash_password(body.password),
                role=Role.CUSTOMER,
            )
        )
        logger.info("registered user %s", user.id)
        return UserOut(id=user.id, username=user.username, email=user.email, role=user.role)

    def login(self, body: LoginBody) -> TokenOut:
        user = self.stores.users.find_by_email(str(body.email))
        if user is None:
            raise NotFoundError("Email or password is invalid")
        if not verify_password(body.password, user.password_hash):
            raise InvalidCredentials("Email or password is invalid")
        token = issue_token(user.id, user.role, self.settings)
        return TokenOut(token=token, expires_in=self.settings.token_ttl_seconds)

    def promote(self, email: str) -> UserOut:
        user = self.stores.users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        user = self.stores.users.set_role(user.id, Role.ADMIN)
        return UserOut(id=user.id, username=user.username, email=user.email, role=user.role)
