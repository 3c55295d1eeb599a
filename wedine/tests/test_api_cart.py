"""
Cart API tests
"""


class TestCart:
    """Cart lines of the signed-in user"""

    def test_add_merges_lines(self, client, auth_headers, catalog):
        client.post("/api/v1/cart", headers=auth_headers, json={"food_id": catalog["dosa_id"]})
        response = client.post("/api/v1/cart", headers=auth_headers,
                               json={"food_id": catalog["dosa_id"], "quantity": 2})

        assert response.status_code == 200
        item = response.json()["data"]
        assert item["quantity"] == 3
        assert item["food_name"] == "Masala Dosa"
        assert item["shop_name"] == "Campus Canteen"

        listing = client.get("/api/v1/cart", headers=auth_headers).json()["data"]
        assert len(listing) == 1

    def test_unknown_food(self, client, auth_headers, catalog):
        response = client.post("/api/v1/cart", headers=auth_headers, json={"food_id": 999})
        assert response.status_code == 404

    def test_decrement_then_delete(self, client, auth_headers, catalog):
        line = client.post("/api/v1/cart", headers=auth_headers,
                           json={"food_id": catalog["dosa_id"], "quantity": 2}).json()["data"]

        first = client.patch("/api/v1/cart", headers=auth_headers, json={"cart_item_id": line["cart_item_id"]})
        second = client.patch("/api/v1/cart", headers=auth_headers, json={"cart_item_id": line["cart_item_id"]})

        assert first.json()["data"]["deleted"] is False
        assert first.json()["data"]["cart_item"]["quantity"] == 1
        assert second.json()["data"]["deleted"] is True
        assert client.get("/api/v1/cart", headers=auth_headers).json()["data"] == []

    def test_other_users_line_is_not_found(self, client, auth_headers, other_auth_headers, catalog):
        line = client.post("/api/v1/cart", headers=auth_headers,
                           json={"food_id": catalog["dosa_id"]}).json()["data"]

        response = client.delete(f"/api/v1/cart/{line['cart_item_id']}", headers=other_auth_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "CART_ITEM_NOT_FOUND"

    def test_remove_and_clear(self, client, auth_headers, catalog):
        dosa = client.post("/api/v1/cart", headers=auth_headers,
                           json={"food_id": catalog["dosa_id"]}).json()["data"]
        client.post("/api/v1/cart", headers=auth_headers, json={"food_id": catalog["biryani_id"]})
        client.post("/api/v1/cart", headers=auth_headers, json={"food_id": catalog["lassi_id"]})

        removed = client.delete(f"/api/v1/cart/{dosa['cart_item_id']}", headers=auth_headers)
        cleared = client.post("/api/v1/cart/clear", headers=auth_headers)

        assert removed.status_code == 200
        assert cleared.json()["data"]["removed"] == 2

    def test_requires_login(self, client):
        assert client.get("/api/v1/cart").status_code == 401
