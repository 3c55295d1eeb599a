"""
Order lifecycle helper tests
"""

import re
from datetime import datetime, timedelta

from wedine.utils.order_lifecycle import (
    DEFAULT_CONFIG,
    calculate_expiry_date,
    create_history_record,
    generate_order_identifier,
    generate_unique_order_identifier,
    is_order_expired,
    items_signature,
    sanitize_food_name,
    sanitize_order_identifier,
    validate_order_data,
    validate_order_for_history,
)

CREATED = datetime(2024, 3, 1, 12, 0, 0)


class TestExpiry:
    """Retention window arithmetic"""

    def test_default_config(self):
        """Defaults are a 24 hour window and hourly cleanup"""
        assert DEFAULT_CONFIG.retention_hours == 24
        assert DEFAULT_CONFIG.cleanup_interval_minutes == 60

    def test_expiry_date(self):
        """Expiry is creation plus the retention window"""
        assert calculate_expiry_date(CREATED) == CREATED + timedelta(hours=24)
        assert calculate_expiry_date(CREATED, 2) == CREATED + timedelta(hours=2)

    def test_expired_only_strictly_after_window(self):
        """An order exactly at its expiry instant is not yet expired"""
        assert not is_order_expired(CREATED, now=CREATED + timedelta(hours=24))
        assert is_order_expired(CREATED, now=CREATED + timedelta(hours=24, seconds=1))
        assert not is_order_expired(CREATED, now=CREATED + timedelta(hours=1))


class TestHistoryRecord:
    """History record construction and validation"""

    def test_create_history_record(self):
        """Fields are copied and lifecycle metadata added"""
        order = {
            "order_id": 7, "user_id": "u1", "user_email": "u1@example.edu",
            "order_identifier": "order-u1", "items": [{"food_name": "Idli", "quantity": 2}],
            "total_paise": 12600, "payment_method": "cod", "status": "delivered",
            "order_status": False, "payment_status": False, "created_at": CREATED,
        }
        archived_at = CREATED + timedelta(hours=25)

        record = create_history_record(order, archived_at)

        assert record["original_order_id"] == 7
        assert record["archived_at"] == archived_at
        assert record["total_paise"] == 12600
        assert record["items"] == order["items"]
        assert record["lifecycle_notes"] == (
            f"Automatically archived after 24 hours on {archived_at.isoformat()}"
        )

    def test_validate_order_for_history_lists_missing_fields(self):
        """Each missing field is reported"""
        valid, errors = validate_order_for_history({})

        assert not valid
        assert errors == [
            "Missing order ID", "Missing user ID", "Missing total amount", "Missing creation date",
        ]

    def test_validate_order_for_history_ok(self):
        valid, errors = validate_order_for_history(
            {"order_id": 1, "user_id": "u", "total_paise": 100, "created_at": CREATED}
        )
        assert valid and errors == []


class TestIdentifiers:
    """Order identifier generation and sanitizing"""

    def test_generate_order_identifier_sorts_items(self):
        """Item order in the cart does not change the hash"""
        items = [{"food_name": "Vada", "quantity": 1}, {"food_name": "Idli", "quantity": 2}]
        assert generate_order_identifier("u1", items, 1700) == "u1_Idli-2|Vada-1_1700"
        assert generate_order_identifier("u1", list(reversed(items)), 1700) == "u1_Idli-2|Vada-1_1700"

    def test_sanitize_food_name(self):
        """Unsafe characters become single dashes, lowercase, trimmed"""
        assert sanitize_food_name("Paneer Tikka (Large)!") == "paneer-tikka-large"
        assert sanitize_food_name("  --Chai--  ") == "chai"
        assert sanitize_food_name("") == "unknown-food"
        assert sanitize_food_name(None) == "unknown-food"

    def test_sanitize_order_identifier(self):
        assert sanitize_order_identifier("Order|A--B") == "order-a-b"
        assert sanitize_order_identifier("") == "unknown-order"

    def test_unique_identifier_shape(self):
        """order-{user}-{method}-{items}-{epoch ms}-{6 base36 chars}"""
        now = datetime(2024, 3, 1, 0, 0, 0)
        items = [{"food_name": "7Up", "quantity": 1}, {"food_name": "Masala Dosa", "quantity": 2}]

        identifier = generate_unique_order_identifier("user@1", items, "online", now)

        assert identifier.startswith("order-user-1-online-")
        assert "item-7up-1" in identifier
        assert "masala-dosa-2" in identifier
        assert re.search(r"-1709251200000-[0-9a-z]{6}$", identifier)

    def test_unique_identifier_differs_between_calls(self):
        """The random suffix separates identical carts placed together"""
        now = datetime(2024, 3, 1)
        items = [{"food_name": "Tea", "quantity": 1}]
        generated = {generate_unique_order_identifier("u", items, "cod", now) for _ in range(20)}
        assert len(generated) > 1

    def test_items_signature(self):
        assert items_signature([{"food_name": "b"}, {"food_name": "a"}]) == ["a", "b"]
        assert items_signature(None) == []


class TestValidateOrderData:
    """Order payload validation"""

    def test_valid(self):
        valid, errors = validate_order_data({
            "user_id": "u1", "items": [{"food_name": "Tea"}], "payment_method": "cod",
            "total_paise": 2100, "order_identifier": "order-u1",
        })
        assert valid and errors == []

    def test_every_problem_reported(self):
        valid, errors = validate_order_data({"items": [], "payment_method": "card", "total_paise": 0})

        assert not valid
        assert "User ID is required" in errors
        assert "Order items are required and must be a non-empty array" in errors
        assert "Valid payment method is required (cod or online)" in errors
        assert "Valid total amount is required" in errors
        assert "Order identifier is required" in errors
