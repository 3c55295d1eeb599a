"""
Order lifecycle utilities

Orders live in two places:
- orders: active orders, kept for the retention window (24 hours)
- order_history: permanent copies (COD at placement, online once paid,
  everything else when archived)

Also holds the identifier and duplicate-comparison helpers used when an
order is placed.
"""

import random
import re
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

PAYMENT_METHODS = ("cod", "online")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")
_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9\-]")
_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class LifecycleConfig:
    retention_hours: int = 24
    cleanup_interval_minutes: int = 60


DEFAULT_CONFIG = LifecycleConfig()


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in TIMESTAMP columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calculate_expiry_date(created_at: datetime, retention_hours: int = 24) -> datetime:
    return created_at + timedelta(hours=retention_hours)


def is_order_expired(created_at: datetime, retention_hours: int = 24,
                     now: Optional[datetime] = None) -> bool:
    now = now or utc_now()
    return now > calculate_expiry_date(created_at, retention_hours)


def expired_cutoff(retention_hours: int = 24, now: Optional[datetime] = None) -> datetime:
    """Orders created before this instant are due for archiving"""
    now = now or utc_now()
    return now - timedelta(hours=retention_hours)


def create_history_record(order: Dict[str, Any], archived_at: datetime,
                          retention_hours: int = DEFAULT_CONFIG.retention_hours) -> Dict[str, Any]:
    """Build an order_history row from an orders row"""
    return {
        "original_order_id": order.get("order_id"),
        "user_id": order.get("user_id"),
        "user_email": order.get("user_email"),
        "order_identifier": order.get("order_identifier"),
        "items": order.get("items") or [],
        "total_paise": order.get("total_paise"),
        "payment_method": order.get("payment_method"),
        "status": order.get("status"),
        "order_status": bool(order.get("order_status")),
        "payment_status": bool(order.get("payment_status")),
        "payment_details": order.get("payment_details") or {},
        "created_at": order.get("created_at"),
        "updated_at": order.get("updated_at"),
        "archived_at": archived_at,
        "lifecycle_notes": (
            f"Automatically archived after {retention_hours} hours "
            f"on {archived_at.isoformat()}"
        ),
    }


def validate_order_for_history(order: Dict[str, Any]) -> Tuple[bool, List[str]]:
    errors = []
    if not order.get("order_id"):
        errors.append("Missing order ID")
    if not order.get("user_id"):
        errors.append("Missing user ID")
    if not order.get("total_paise"):
        errors.append("Missing total amount")
    if not order.get("created_at"):
        errors.append("Missing creation date")
    return len(errors) == 0, errors


def _item_name(item: Dict[str, Any]) -> str:
    return item.get("food_name") or "unknown"


def generate_order_identifier(user_id: str, cart_items: List[Dict[str, Any]], timestamp: int) -> str:
    item_hash = "|".join(sorted(
        f"{_item_name(item)}-{item.get('quantity')}" for item in cart_items
    ))
    return f"{user_id}_{item_hash}_{timestamp}"


def _sanitize(value: str) -> str:
    value = _UNSAFE_CHARS.sub("-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-").lower()


def sanitize_order_identifier(order_identifier: Optional[str]) -> str:
    if not order_identifier:
        return "unknown-order"
    return _sanitize(order_identifier)


def sanitize_food_name(food_name: Optional[str]) -> str:
    if not food_name:
        return "unknown-food"
    return _sanitize(food_name)


def _base36_suffix(length: int = 6) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))


def generate_unique_order_identifier(user_id: str, cart_items: List[Dict[str, Any]],
                                     payment_method: str,
                                     now: Optional[datetime] = None) -> str:
    """
    order-{user}-{method}-{items}-{epoch ms}-{random}

    Not guaranteed unique; it narrows accidental duplicates only.
    """
    now = now or utc_now()
    timestamp = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)

    parts = []
    for item in cart_items:
        name = sanitize_food_name(_item_name(item))
        if name[:1].isdigit():
            name = f"item-{name}"
        parts.append(f"{name}-{item.get('quantity')}")
    item_hash = "|".join(sorted(parts))

    safe_user_id = _UNSAFE_ID_CHARS.sub("-", str(user_id))
    safe_method = _UNSAFE_ID_CHARS.sub("-", payment_method)
    return f"order-{safe_user_id}-{safe_method}-{item_hash}-{timestamp}-{_base36_suffix()}"


def items_signature(items: List[Dict[str, Any]]) -> List[str]:
    """Sorted food names; two orders with equal signatures look alike"""
    return sorted(_item_name(item) for item in items or [])


def validate_order_data(order_data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    errors = []

    if not order_data.get("user_id"):
        errors.append("User ID is required")

    items = order_data.get("items")
    if not isinstance(items, list) or len(items) == 0:
        errors.append("Order items are required and must be a non-empty array")

    if order_data.get("payment_method") not in PAYMENT_METHODS:
        errors.append("Valid payment method is required (cod or online)")

    total = order_data.get("total_paise")
    if isinstance(total, bool) or not isinstance(total, (int, float)) or total <= 0:
        errors.append("Valid total amount is required")

    if not order_data.get("order_identifier"):
        errors.append("Order identifier is required")

    return len(errors) == 0, errors
