"""
Admin dashboard API tests
"""


def setup_admin(client, shop_name="Campus Canteen", username="canteen_admin", password="s3cret-pass", headers=None):
    return client.post(
        "/api/v1/admin/setup-credentials",
        json={"shop_name": shop_name, "username": username, "password": password},
        headers=headers or {},
    )


class TestSetupCredentials:
    """POST /admin/setup-credentials"""

    def test_creates_credentials(self, client, catalog, test_db):
        response = setup_admin(client)

        assert response.status_code == 200
        assert response.json()["data"]["shop_name"] == "Campus Canteen"
        stored = test_db.fetch_dict("SELECT password_hash FROM admin_credentials WHERE admin_username = ?",
                                    ["canteen_admin"])
        assert stored["password_hash"] != "s3cret-pass"

    def test_missing_fields(self, client, catalog):
        response = setup_admin(client, password="")
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_shop(self, client, catalog):
        response = setup_admin(client, shop_name="Nowhere Cafe")
        assert response.status_code == 404

    def test_second_setup_conflicts(self, client, catalog):
        setup_admin(client)
        response = setup_admin(client, username="another_admin")
        assert response.status_code == 409
        assert response.json()["error_code"] == "CREDENTIALS_EXIST"

    def test_setup_token_enforced_when_configured(self, client, catalog, test_settings):
        test_settings.admin_setup_token = "let-me-in"

        denied = setup_admin(client)
        allowed = setup_admin(client, headers={"X-Setup-Token": "let-me-in"})

        assert denied.status_code == 403
        assert allowed.status_code == 200


class TestAdminLogin:
    """POST /admin/login"""

    def test_login_returns_admin_token(self, client, catalog, test_db):
        setup_admin(client)

        response = client.post("/api/v1/admin/login", json={"username": "canteen_admin", "password": "s3cret-pass"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["shop_name"] == "Campus Canteen"
        assert data["token"]
        last_login = test_db.execute_one(
            "SELECT last_login FROM admin_credentials WHERE admin_username = 'canteen_admin'"
        )[0]
        assert last_login is not None

        orders = client.get("/api/v1/admin/orders", headers={"Authorization": f"Bearer {data['token']}"})
        assert orders.status_code == 200

    def test_wrong_password(self, client, catalog):
        setup_admin(client)
        response = client.post("/api/v1/admin/login", json={"username": "canteen_admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"

    def test_unknown_user(self, client, catalog):
        response = client.post("/api/v1/admin/login", json={"username": "ghost", "password": "nope"})
        assert response.status_code == 401

    def test_inactive_account(self, client, catalog, test_db):
        setup_admin(client)
        test_db.execute_query("UPDATE admin_credentials SET is_active = FALSE")

        response = client.post("/api/v1/admin/login", json={"username": "canteen_admin", "password": "s3cret-pass"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "ACCOUNT_INACTIVE"


class TestAdminOrders:
    """Shop-scoped order listing and status updates"""

    def test_lists_only_orders_with_shop_items(self, client, admin_headers, juice_admin_headers, insert_order, catalog):
        insert_order()
        juice_line = {
            "food_id": catalog["lassi_id"], "food_name": "Mango Lassi", "quantity": 1,
            "price": 4000, "shop_id": catalog["juice_id"], "shop_name": "Juice Corner",
        }
        insert_order(user_id="user-2", items=[juice_line])

        canteen = client.get("/api/v1/admin/orders", headers=admin_headers).json()["data"]
        juice = client.get("/api/v1/admin/orders", headers=juice_admin_headers).json()["data"]

        assert len(canteen) == 1
        assert canteen[0]["items"][0]["shop_name"] == "Campus Canteen"
        assert len(juice) == 1
        assert juice[0]["user_id"] == "user-2"

    def test_user_token_rejected(self, client, auth_headers):
        response = client.get("/api/v1/admin/orders", headers=auth_headers)
        assert response.status_code == 403

    def test_update_status(self, client, admin_headers, insert_order, test_db):
        order_id = insert_order()

        response = client.patch(
            "/api/v1/admin/update-order-status",
            headers=admin_headers,
            json={"order_id": order_id, "status": "out for delivery"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["old_status"] == "ordered"
        assert data["new_status"] == "out for delivery"
        assert test_db.execute_one("SELECT status FROM orders WHERE order_id = ?", [order_id])[0] == "out for delivery"

    def test_paid_is_not_an_admin_status(self, client, admin_headers, insert_order):
        order_id = insert_order()
        response = client.patch(
            "/api/v1/admin/update-order-status",
            headers=admin_headers,
            json={"order_id": order_id, "status": "paid"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_STATUS"

    def test_unknown_order(self, client, admin_headers, catalog):
        response = client.patch(
            "/api/v1/admin/update-order-status",
            headers=admin_headers,
            json={"order_id": 999, "status": "preparing"},
        )
        assert response.status_code == 404

    def test_other_shops_order(self, client, juice_admin_headers, insert_order):
        order_id = insert_order()
        response = client.patch(
            "/api/v1/admin/update-order-status",
            headers=juice_admin_headers,
            json={"order_id": order_id, "status": "preparing"},
        )
        assert response.status_code == 403


class TestCatalogMaintenance:
    """Catalog creation by shop staff"""

    def test_create_shop_category_and_item(self, client, admin_headers):
        shop = client.post("/api/v1/admin/shops", headers=admin_headers,
                           json={"shop_name": "Chai Point", "owner_mobile": "+919800000003"})
        category = client.post("/api/v1/admin/categories", headers=admin_headers,
                               json={"category_name": "Beverages"})
        assert shop.status_code == 200
        assert category.status_code == 200

        item = client.post(
            "/api/v1/admin/food-items",
            headers=admin_headers,
            json={
                "food_name": "Masala Chai",
                "shop_id": shop.json()["data"]["shop_id"],
                "category_id": category.json()["data"]["category_id"],
                "price_paise": 1500,
                "quantity": 50,
            },
        )

        assert item.status_code == 200
        data = item.json()["data"]
        assert data["shop_name"] == "Chai Point"
        assert data["category_name"] == "Beverages"

    def test_duplicate_shop(self, client, admin_headers, catalog):
        response = client.post("/api/v1/admin/shops", headers=admin_headers, json={"shop_name": "Campus Canteen"})
        assert response.status_code == 400

    def test_food_item_for_unknown_shop(self, client, admin_headers, catalog):
        response = client.post(
            "/api/v1/admin/food-items", headers=admin_headers,
            json={"food_name": "Ghost Roll", "shop_id": 999, "price_paise": 1000},
        )
        assert response.status_code == 404
