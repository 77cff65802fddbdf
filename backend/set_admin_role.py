#!/usr/bin/env python3
"""
Promotes a registered user to the admin role in the users collection.
The user has to log in again: the role travels inside the bearer token.
"""

import sys

from storefront.config import get_settings
from storefront.core.errors import NotFoundError
from storefront.repositories import firestore_stores
from storefront.services.accounts import AccountService


def set_admin_role(user_email: str) -> bool:
    """Sets role=admin for the user with this email."""
    try:
        settings = get_settings()
        stores = firestore_stores(settings)
        print("✅ Firestore initialized")
    except Exception as e:
        print(f"❌ Firestore initialization failed: {e}")
        return False

    try:
        user = AccountService(stores, settings).promote(user_email)
        print(f"✅ User promoted: {user.id} - {user.email} ({user.role.value})")
        return True
    except NotFoundError:
        print(f"❌ User not found: {user_email}")
        return False


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python set_admin_role.py <user_email>")
        print("Example: python set_admin_role.py admin@example.com")
        sys.exit(1)

    user_email = sys.argv[1]
    print(f"Setting admin role for: {user_email}")

    if set_admin_role(user_email):
        print("🎉 Admin role set successfully!")
        print("The user will need to log in again for the change to take effect.")
    else:
        print("💥 Failed to set admin role")
        sys.exit(1)
