from datetime import datetime, timedelta, timezone

import jwt
import pytest

from storefront.core.errors import AuthError, AuthErrorKind
from storefront.core.tokens import issue_token, verify_token
from storefront.schemas.principal import Role


class TestVerifyToken:
    def test_round_trip_identity(self, settings):
        token = issue_token("u1", Role.ADMIN, settings)

        identity = verify_token(token, settings)

        assert identity.subject == "u1"
        assert identity.role is Role.ADMIN

    def test_token_older_than_one_hour_is_invalid(self, settings):
        issued = datetime.now(timezone.utc) - timedelta(hours=1, seconds=1)
        token = issue_token("u1", Role.CUSTOMER, settings, now=issued)

        with pytest.raises(AuthError) as exc:
            verify_token(token, settings)
        assert exc.value.kind is AuthErrorKind.INVALID

    def test_token_just_under_one_hour_is_valid(self, settings):
        issued = datetime.now(timezone.utc) - timedelta(minutes=59)
        token = issue_token("u1", Role.CUSTOMER, settings, now=issued)

        assert verify_token(token, settings).subject == "u1"

    def test_wrong_secret_is_invalid(self, settings):
        token = jwt.encode(
            {"sub": "u1", "role": "admin", "iat": datetime.now(timezone.utc),
             "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "another-secret-0123456789",
            algorithm="HS256",
        )

        with pytest.raises(AuthError) as exc:
            verify_token(token, settings)
        assert exc.value.kind is AuthErrorKind.INVALID

    def test_garbage_is_invalid(self, settings):
        with pytest.raises(AuthError) as exc:
            verify_token("not-a-token", settings)
        assert exc.value.kind is AuthErrorKind.INVALID

    def test_unknown_role_is_invalid(self, settings):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "u1", "role": "superuser", "iat": now, "exp": now + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthError) as exc:
            verify_token(token, settings)
        assert exc.value.kind is AuthErrorKind.INVALID

    def test_missing_expiry_is_invalid(self, settings):
        token = jwt.encode({"sub": "u1", "role": "customer", "iat": datetime.now(timezone.utc)},
                           settings.jwt_secret, algorithm="HS256")

        with pytest.raises(AuthError):
            verify_token(token, settings)


class TestBearerHeader:
    def test_missing_header(self, client):
        response = client.get("/cart/u1")

        assert response.status_code == 401
        assert response.json() == {"message": "Access denied. No token provided."}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_non_bearer_scheme_counts_as_missing(self, client, settings):
        token = issue_token("u1", Role.CUSTOMER, settings)

        response = client.get("/cart/u1", headers={"Authorization": f"Token {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    def test_expired_token_rejected_over_http(self, client, settings):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_token("u1", Role.CUSTOMER, settings, now=issued)

        response = client.get("/cart/u1", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token expired."
