"""
storefront/config.py - Application configuration and document store initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and a helper that initializes the Firebase Admin SDK (Firestore) from those settings.
Nothing here runs at import time: `create_app()` builds the settings object and the
store client once at startup and hands them to the parts that need them.
"""
from functools import lru_cache
from typing import Literal, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Token signing
    jwt_secret: str = Field(..., min_length=16, description="HMAC secret used to sign bearer tokens")
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = Field(3600, gt=0)

    # Document store
    store_backend: Literal["firestore", "memory"] = "firestore"
    collection_prefix: str = ""
    firebase_cred_file: str = "firebase_service_account.json"
    firebase_project_id: Optional[str] = None

    # Payment gateway (Zarinpal). Empty merchant id -> FakeGateway (development).
    zarinpal_merchant_id: str = ""
    zarinpal_sandbox: bool = True
    payment_callback_url: str = "http://localhost:8000/payment/verify"
    payment_timeout: int = Field(15, gt=0)

    allowed_origins: str = "*"  # Comma-separated list or '*' for all
    log_level: str = "INFO"
    debug: bool = False

    @property
    def zarinpal_base_url(self) -> str:
        """Sandbox or production API root depending on ZARINPAL_SANDBOX."""
        return (
            "https://sandbox.zarinpal.com/pg"
            if self.zarinpal_sandbox
            else "https://payment.zarinpal.com/pg"
        )

    def collection(self, name: str) -> str:
        return f"{self.collection_prefix}{name}" if self.collection_prefix else name


@lru_cache
def get_settings() -> Settings:
    return Settings()


def init_firestore(settings: Settings):
    """
    Initialize Firebase Admin SDK and return a Firestore client.
    Re-uses the default app if it was already initialized (e.g. uvicorn reload).
    """
    try:
        cred = credentials.Certificate(settings.firebase_cred_file)
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
        firebase_app = firebase_admin.initialize_app(cred, options)
    except ValueError as e:
        if "already exists" in str(e):
            firebase_app = firebase_admin.get_app()
        else:
            raise
    return firestore.client(app=firebase_app)
