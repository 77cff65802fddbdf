from datetime import datetime, timedelta, timezone

from storefront.schemas.discount import DiscountCode


def _future(days=7):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


class TestDiscounts:
    def test_create_with_code(self, client, admin):
        response = client.post(
            "/admin/discounts",
            json={"code": "SPRING20", "percentage": 20, "expires_at": _future()},
            headers=admin,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "SPRING20"
        assert data["percentage"] == 20
        assert data["expired"] is False

    def test_generated_code_when_missing(self, client, admin, store):
        response = client.post("/admin/discounts", json={"percentage": 5, "expires_at": _future()}, headers=admin)

        assert response.status_code == 201
        assert response.json()["code"] in store.discounts

    def test_duplicate_code_conflicts(self, client, admin):
        body = {"code": "SPRING20", "percentage": 20, "expires_at": _future()}
        client.post("/admin/discounts", json=body, headers=admin)

        response = client.post("/admin/discounts", json=body, headers=admin)

        assert response.status_code == 409

    def test_past_expiry_rejected(self, client, admin):
        response = client.post(
            "/admin/discounts",
            json={"code": "OLD10", "percentage": 10, "expires_at": _future(days=-1)},
            headers=admin,
        )

        assert response.status_code == 400

    def test_percentage_out_of_range(self, client, admin):
        response = client.post(
            "/admin/discounts",
            json={"code": "HUGE", "percentage": 150, "expires_at": _future()},
            headers=admin,
        )

        assert response.status_code == 400

    def test_list_flags_expired(self, client, admin, store):
        store.discounts["GONE"] = DiscountCode(
            code="GONE", percentage=10, expires_at=datetime.now(timezone.utc) - timedelta(days=1)
        )

        response = client.get("/admin/discounts", headers=admin)

        assert response.status_code == 200
        assert response.json()[0]["expired"] is True

    def test_delete(self, client, admin, store):
        client.post("/admin/discounts", json={"code": "SPRING20", "percentage": 20, "expires_at": _future()}, headers=admin)

        assert client.delete("/admin/discounts/SPRING20", headers=admin).status_code == 204
        assert "SPRING20" not in store.discounts
        assert client.delete("/admin/discounts/SPRING20", headers=admin).status_code == 404

    def test_customer_forbidden(self, client, customer):
        response = client.get("/admin/discounts", headers=customer)

        assert response.status_code == 403
