import pytest

from storefront.core.tokens import verify_token
from storefront.schemas.principal import Role
from storefront.services.accounts import AccountService


@pytest.fixture()
def registered(client):
    body = {"username": "sara", "email": "Sara@Example.com", "password": "hunter22"}
    return client.post("/auth/register", json=body).json()["user"]


class TestRegister:
    def test_creates_customer(self, client, store):
        response = client.post(
            "/auth/register",
            json={"username": "sara", "email": "sara@example.com", "password": "hunter22"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User registered successfully"
        assert data["user"]["role"] == "customer"
        assert "password" not in data["user"]
        saved = store.users[data["user"]["id"]]
        assert saved.password_hash != "hunter22"

    def test_duplicate_email_conflicts(self, client, registered):
        response = client.post(
            "/auth/register",
            json={"username": "other", "email": "sara@example.com", "password": "secret99"},
        )

        assert response.status_code == 409
        assert response.json() == {"message": "User already exists"}

    def test_validation_errors_are_listed(self, client):
        response = client.post("/auth/register", json={"username": "x", "email": "not-an-email", "password": "123"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid request"
        assert {e["field"] for e in body["errors"]} == {"email", "password"}


class TestLogin:
    def test_issues_token_for_registered_user(self, client, registered, settings):
        response = client.post("/auth/login", json={"email": "sara@example.com", "password": "hunter22"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        identity = verify_token(data["token"], settings)
        assert identity.subject == registered["id"]
        assert identity.role is Role.CUSTOMER

    def test_token_opens_own_cart(self, client, registered):
        token = client.post("/auth/login", json={"email": "sara@example.com", "password": "hunter22"}).json()["token"]

        response = client.post(
            f"/cart/{registered['id']}",
            json={"productId": "P"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200

    def test_wrong_password(self, client, registered):
        response = client.post("/auth/login", json={"email": "sara@example.com", "password": "wrong-one"})

        assert response.status_code == 400
        assert response.json() == {"message": "Email or password is invalid"}

    def test_unknown_email(self, client):
        response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

        assert response.status_code == 404


class TestPromote:
    def test_promoted_user_gets_admin_token(self, stores, settings, client, registered):
        svc = AccountService(stores, settings)

        promoted = svc.promote("sara@example.com")

        assert promoted.role is Role.ADMIN
        token = client.post("/auth/login", json={"email": "sara@example.com", "password": "hunter22"}).json()["token"]
        response = client.get("/admin/orders", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
