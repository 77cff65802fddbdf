import pytest

from storefront.core.errors import AuthError, AuthErrorKind
from storefront.core.security import authorize, authorize_owner
from storefront.schemas.principal import Identity, Role


class TestRoleGate:
    def test_absent_identity_is_unauthenticated(self):
        with pytest.raises(AuthError) as exc:
            authorize(None, Role.ADMIN)
        assert exc.value.kind is AuthErrorKind.UNAUTHENTICATED
        assert exc.value.status_code == 401

    def test_wrong_role_is_forbidden(self):
        with pytest.raises(AuthError) as exc:
            authorize(Identity(subject="u1", role=Role.CUSTOMER), Role.ADMIN)
        assert exc.value.kind is AuthErrorKind.FORBIDDEN
        assert exc.value.status_code == 403

    def test_matching_role_passes(self):
        identity = Identity(subject="boss", role=Role.ADMIN)
        assert authorize(identity, Role.ADMIN) is identity


class TestOwnerGate:
    def test_owner_passes(self):
        identity = Identity(subject="u1", role=Role.CUSTOMER)
        assert authorize_owner(identity, "u1") is identity

    def test_other_customer_forbidden(self):
        with pytest.raises(AuthError) as exc:
            authorize_owner(Identity(subject="u2", role=Role.CUSTOMER), "u1")
        assert exc.value.kind is AuthErrorKind.FORBIDDEN

    def test_admin_passes_for_anyone(self):
        identity = Identity(subject="boss", role=Role.ADMIN)
        assert authorize_owner(identity, "u1") is identity


class TestAdminRoutes:
    def test_customer_token_forbidden(self, client, customer):
        response = client.get("/admin/orders", headers=customer)

        assert response.status_code == 403
        assert response.json() == {"message": "Unauthorized access: Admin only"}

    def test_admin_token_accepted(self, client, admin):
        response = client.get("/admin/orders", headers=admin)

        assert response.status_code == 200
        assert response.json() == []

    def test_no_token_unauthenticated(self, client):
        response = client.get("/admin/discounts")

        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized: User not authenticated"}

    def test_invalid_token_on_admin_route(self, client):
        response = client.get("/admin/orders", headers={"Authorization": "Bearer broken"})

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid token."}


class TestOwnership:
    def test_customer_cannot_read_another_cart(self, client, make_headers):
        response = client.get("/cart/u1", headers=make_headers("u2"))

        assert response.status_code == 403

    def test_auth_failure_does_not_touch_store(self, client, make_headers, stores):
        client.post("/cart/u1", json={"productId": "P", "quantity": 1}, headers=make_headers("u2"))

        assert stores.carts.get("u1") is None

    def test_admin_can_read_another_cart(self, client, customer, admin):
        client.post("/cart/u1", json={"productId": "P", "quantity": 1}, headers=customer)

        response = client.get("/cart/u1", headers=admin)

        assert response.status_code == 200
        assert response.json()["user_id"] == "u1"
