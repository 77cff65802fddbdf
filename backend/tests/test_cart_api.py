class TestAddToCart:
    def test_add_product(self, client, customer):
        response = client.post("/cart/u1", json={"productId": "P", "quantity": 2}, headers=customer)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Product added to cart"
        assert data["cart"]["items"][0]["product_id"] == "P"
        assert data["cart"]["items"][0]["quantity"] == 2
        assert data["cart"]["total_amount"] == 200.0

    def test_same_product_twice_merges_into_one_line(self, client, customer, stores):
        client.post("/cart/u1", json={"productId": "P", "quantity": 2}, headers=customer)
        client.post("/cart/u1", json={"productId": "P", "quantity": 3}, headers=customer)

        cart = stores.carts.get("u1")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_snake_case_body_accepted(self, client, customer):
        response = client.post("/cart/u1", json={"product_id": "Q"}, headers=customer)

        assert response.status_code == 200
        assert response.json()["cart"]["items"][0]["quantity"] == 1

    def test_unknown_product_is_404(self, client, customer, stores):
        response = client.post("/cart/u1", json={"productId": "nope", "quantity": 1}, headers=customer)

        assert response.status_code == 404
        assert response.json() == {"message": "Product not found"}
        assert stores.carts.get("u1") is None

    def test_zero_quantity_rejected(self, client, customer):
        response = client.post("/cart/u1", json={"productId": "P", "quantity": 0}, headers=customer)

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid request"
        assert body["errors"][0]["field"] == "quantity"

    def test_blank_product_id_rejected(self, client, customer):
        response = client.post("/cart/u1", json={"productId": "\u200b  ", "quantity": 1}, headers=customer)

        assert response.status_code == 400


class TestGetCart:
    def test_no_cart_is_404(self, client, customer):
        response = client.get("/cart/u1", headers=customer)

        assert response.status_code == 404
        assert response.json() == {"message": "Cart not found"}

    def test_resolves_product_details(self, client, customer):
        client.post("/cart/u1", json={"productId": "P", "quantity": 2}, headers=customer)
        client.post("/cart/u1", json={"productId": "Q", "quantity": 1}, headers=customer)

        response = client.get("/cart/u1", headers=customer)

        assert response.status_code == 200
        data = response.json()
        assert data["total_quantity"] == 3
        assert data["total_amount"] == 250.0
        first = data["items"][0]
        assert first["product"] == {"id": "P", "name": "Keyboard", "price": 100.0, "image": "https://img/p.png"}
        assert first["subtotal"] == 200.0

    def test_vanished_product_is_flagged(self, client, customer, store):
        client.post("/cart/u1", json={"productId": "Q", "quantity": 1}, headers=customer)
        del store.products["Q"]

        data = client.get("/cart/u1", headers=customer).json()

        assert data["items"][0]["unresolved"] is True
        assert data["total_amount"] == 0.0


class TestRemoveAndClear:
    def test_remove_line(self, client, customer):
        client.post("/cart/u1", json={"productId": "P", "quantity": 1}, headers=customer)
        client.post("/cart/u1", json={"productId": "Q", "quantity": 1}, headers=customer)

        response = client.delete("/cart/u1/items/P", headers=customer)

        assert response.status_code == 200
        assert [it["product_id"] for it in response.json()["cart"]["items"]] == ["Q"]

    def test_remove_missing_line_is_404(self, client, customer):
        client.post("/cart/u1", json={"productId": "P", "quantity": 1}, headers=customer)

        response = client.delete("/cart/u1/items/Q", headers=customer)

        assert response.status_code == 404
        assert response.json() == {"message": "Item not found in cart."}

    def test_clear(self, client, customer, stores):
        client.post("/cart/u1", json={"productId": "P", "quantity": 1}, headers=customer)

        response = client.delete("/cart/u1", headers=customer)

        assert response.status_code == 204
        assert stores.carts.get("u1") is None
