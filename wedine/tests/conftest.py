"""
Test configuration
Fixtures: in-memory database, seeded catalog, tokens and fake gateways
"""

import os

os.environ.setdefault("WEDINE_DATABASE_URL", "duckdb://:memory:")
os.environ.setdefault("WEDINE_JWT_SECRET_KEY", "test-secret-key-for-the-wedine-suite")

import pytest
from fastapi.testclient import TestClient

from wedine.app import create_app
from wedine.config.settings import settings
from wedine.core.database import db_manager
from wedine.core.security import security_manager
from wedine.services.notification_service import SmsGateway, notification_service
from wedine.services.order_service import order_service
from wedine.services.payment_service import RazorpayGateway, payment_service

RAZORPAY_SECRET = "test_razorpay_secret"


class FakeRazorpayGateway(RazorpayGateway):
    """Gateway double: real signature check, canned REST responses"""

    def __init__(self):
        self.created_orders = []
        self.fail_create = False
        self.fail_lookup = False

    def create_order(self, amount_paise, currency=None, receipt=None, notes=None):
        if self.fail_create:
            return {"success": False, "error": "gateway down"}
        order_id = f"order_test_{len(self.created_orders) + 1}"
        self.created_orders.append({"order_id": order_id, "amount": amount_paise,
                                    "receipt": receipt, "notes": notes})
        return {"success": True, "order_id": order_id}

    def get_payment_details(self, payment_id):
        if self.fail_lookup:
            return {"success": False, "error": "lookup failed"}
        return {"success": True, "transaction_id": f"txn_{payment_id}", "status": "captured", "method": "upi"}


class FakeSmsGateway(SmsGateway):
    def __init__(self):
        self.sent = []

    def send_sms(self, to, body):
        self.sent.append({"to": to, "body": body})
        return {"success": True, "sid": f"SM{len(self.sent)}"}


@pytest.fixture(autouse=True)
def test_db():
    """Fresh in-memory database for every test"""
    db_manager.reset("duckdb://:memory:")
    db_manager.init_database()
    yield db_manager
    db_manager.reset("duckdb://:memory:")


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Deterministic settings; individual tests override further"""
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "duplicate_window_minutes", None)
    monkeypatch.setattr(settings, "razorpay_key_id", "rzp_test_key")
    monkeypatch.setattr(settings, "razorpay_key_secret", RAZORPAY_SECRET)
    monkeypatch.setattr(settings, "cron_secret_token", "cron-secret")
    monkeypatch.setattr(settings, "admin_setup_token", None)
    monkeypatch.setattr(settings, "mock_auth_enabled", False)
    monkeypatch.setattr(settings, "order_retention_hours", 24)
    monkeypatch.setattr(settings, "pending_order_timeout_minutes", 5)
    monkeypatch.setattr(settings, "twilio_account_sid", None)
    monkeypatch.setattr(settings, "twilio_auth_token", None)
    monkeypatch.setattr(settings, "twilio_phone_number", None)
    return settings


@pytest.fixture(autouse=True)
def fake_gateway(monkeypatch):
    gateway = FakeRazorpayGateway()
    monkeypatch.setattr(order_service, "gateway", gateway)
    monkeypatch.setattr(payment_service, "gateway", gateway)
    return gateway


@pytest.fixture(autouse=True)
def fake_sms(monkeypatch):
    gateway = FakeSmsGateway()
    monkeypatch.setattr(notification_service, "gateway", gateway)
    return gateway


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def catalog(test_db):
    """Two shops, one category and three food items"""
    conn = test_db.get_connection()
    canteen = conn.execute(
        "INSERT INTO shops(shop_name, owner_name, owner_mobile) VALUES (?,?,?) RETURNING shop_id",
        ["Campus Canteen", "Ravi", "+919800000001"],
    ).fetchone()[0]
    juice = conn.execute(
        "INSERT INTO shops(shop_name, owner_name, owner_mobile) VALUES (?,?,?) RETURNING shop_id",
        ["Juice Corner", "Meena", "+919800000002"],
    ).fetchone()[0]
    meals = conn.execute(
        "INSERT INTO categories(category_name) VALUES ('Meals') RETURNING category_id"
    ).fetchone()[0]

    def add_food(name, shop_id, price, stock):
        return conn.execute(
            "INSERT INTO food_items(food_name, shop_id, category_id, price_paise, quantity) "
            "VALUES (?,?,?,?,?) RETURNING food_id",
            [name, shop_id, meals, price, stock],
        ).fetchone()[0]

    return {
        "canteen_id": canteen,
        "juice_id": juice,
        "category_id": meals,
        "dosa_id": add_food("Masala Dosa", canteen, 6000, 10),
        "biryani_id": add_food("Veg Biryani", canteen, 12000, 5),
        "lassi_id": add_food("Mango Lassi", juice, 4000, 1),
    }


@pytest.fixture
def user():
    return {"user_id": "user-1", "email": "user1@example.edu"}


@pytest.fixture
def auth_headers(user):
    token = security_manager.create_user_token(user["user_id"], user["email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    token = security_manager.create_user_token("user-2", "user2@example.edu")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    token = security_manager.create_admin_token("canteen_admin", "Campus Canteen")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def juice_admin_headers():
    token = security_manager.create_admin_token("juice_admin", "Juice Corner")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def cron_headers():
    return {"Authorization": "Bearer cron-secret"}


@pytest.fixture
def insert_order(test_db, catalog):
    """Insert an order row directly, bypassing the service checks"""
    from wedine.models.order import ORDER_INSERT_SQL, Order, PaymentDetails
    from wedine.utils.order_lifecycle import utc_now

    def _insert(user_id="user-1", payment_method="cod", created_at=None, status="ordered",
                payment_status=False, identifier=None, items=None, razorpay_order_id=""):
        created_at = created_at or utc_now()
        items = items or [{
            "food_id": catalog["dosa_id"], "food_name": "Masala Dosa", "quantity": 1,
            "price": 6000, "shop_id": catalog["canteen_id"], "shop_name": "Campus Canteen",
        }]
        subtotal = sum(i["price"] * i["quantity"] for i in items)
        order = Order(
            user_id=user_id,
            order_identifier=identifier,
            items=items,
            subtotal_paise=subtotal,
            tax_paise=0,
            delivery_fee_paise=0,
            total_paise=subtotal,
            payment_method=payment_method,
            status=status,
            order_status=payment_status,
            payment_status=payment_status,
            payment_details=PaymentDetails(razorpay_order_id=razorpay_order_id),
            created_at=created_at,
            updated_at=created_at,
        )
        return test_db.execute_one(ORDER_INSERT_SQL, order.insert_params())[0]

    return _insert
