"""Tests for the cart router."""


class TestCartRouter:
    def test_empty_cart(self, client, customer_headers):
        response = client.get("/api/cart", headers=customer_headers)

        assert response.status_code == 200
        assert response.json() == {"items": [], "total_amount": 0}

    def test_requires_authentication(self, client):
        assert client.get("/api/cart").status_code == 401

    def test_add_update_remove(self, client, customer_headers, make_product):
        product = make_product(price=15.0)

        added = client.post(
            "/api/cart", json={"product_id": product.id, "quantity": 2}, headers=customer_headers
        )
        assert added.status_code == 201
        body = added.json()
        assert body["total_amount"] == 30.0
        item_id = body["items"][0]["id"]

        updated = client.put(
            f"/api/cart/{item_id}", json={"quantity": 3}, headers=customer_headers
        )
        assert updated.json()["total_amount"] == 45.0

        removed = client.delete(f"/api/cart/{item_id}", headers=customer_headers)
        assert removed.status_code == 200
        assert removed.json()["items"] == []

    def test_unknown_product(self, client, customer_headers):
        response = client.post(
            "/api/cart", json={"product_id": "missing"}, headers=customer_headers
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    def test_unknown_item(self, client, customer_headers, make_product):
        missing_cart = client.put("/api/cart/x", json={"quantity": 1}, headers=customer_headers)
        assert missing_cart.json()["detail"] == "Cart not found"

        client.post("/api/cart", json={"product_id": make_product().id}, headers=customer_headers)
        missing_item = client.put("/api/cart/x", json={"quantity": 1}, headers=customer_headers)
        assert missing_item.status_code == 404
        assert missing_item.json()["detail"] == "Item not found in cart"

    def test_clear_cart(self, client, customer_headers, make_product):
        client.post("/api/cart", json={"product_id": make_product().id}, headers=customer_headers)

        response = client.delete("/api/cart", headers=customer_headers)

        assert response.json() == {"message": "Cart cleared"}
        assert client.get("/api/cart", headers=customer_headers).json()["items"] == []
