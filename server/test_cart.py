import pytest


@pytest.fixture
def products(add_product):
    add_product('messi-jersey', price=400.0)
    add_product('messi-photo', title='Messi World Cup Photo', price=150.0)
    add_product('sold-out', available=False)


class TestCart:

    def test_empty_cart(self, client, customer_headers):
        response = client.get("/api/cart", headers=customer_headers)
        assert response.status_code == 200
        assert response.json() == {"items": [], "itemCount": 0, "total": 0.0}

    def test_adding_same_product_merges_quantity(self, client, customer_headers, products):
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-jersey"})
        response = client.post("/api/cart/items", headers=customer_headers,
                               json={"productId": "messi-jersey", "quantity": 2})

        data = response.json()
        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 3
        assert data["itemCount"] == 3
        assert data["total"] == 1200.0

    def test_cart_is_per_user(self, client, customer_headers, other_headers, products):
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-jersey"})
        assert client.get("/api/cart", headers=other_headers).json()["itemCount"] == 0

    def test_update_quantity(self, client, customer_headers, products):
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-jersey"})
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-photo"})

        data = client.put("/api/cart/items/messi-photo", headers=customer_headers, json={"quantity": 4}).json()
        assert data["total"] == 1000.0

    def test_zero_quantity_removes_line(self, client, customer_headers, products):
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-jersey"})
        data = client.put("/api/cart/items/messi-jersey", headers=customer_headers, json={"quantity": 0}).json()
        assert data["items"] == []

    def test_update_item_not_in_cart(self, client, customer_headers, products):
        response = client.put("/api/cart/items/messi-jersey", headers=customer_headers, json={"quantity": 1})
        assert response.status_code == 404

    def test_remove_line_and_clear(self, client, customer_headers, products):
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-jersey"})
        client.post("/api/cart/items", headers=customer_headers, json={"productId": "messi-photo"})

        data = client.delete("/api/cart/items/messi-jersey", headers=customer_headers).json()
        assert [item["productId"] for item in data["items"]] == ["messi-photo"]

        client.delete("/api/cart", headers=customer_headers)
        assert client.get("/api/cart", headers=customer_headers).json()["items"] == []

    def test_unavailable_product_cannot_be_added(self, client, customer_headers, products):
        response = client.post("/api/cart/items", headers=customer_headers, json={"productId": "sold-out"})
        assert response.status_code == 409

    def test_unknown_product_cannot_be_added(self, client, customer_headers):
        response = client.post("/api/cart/items", headers=customer_headers, json={"productId": "nope"})
        assert response.status_code == 404

    def test_cart_requires_login(self, client):
        assert client.get("/api/cart").status_code == 401
