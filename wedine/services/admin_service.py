"""
Admin service
Shop staff credentials, login and order management

Main features:
- One credential set per shop, passwords stored hashed
- Admin JWT issued on login
- Shop-scoped order listings
- Status updates written in a transaction and verified by read-back
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.database import db_manager
from ..core.exceptions import (
    AccountInactiveError,
    CredentialsExistError,
    InvalidCredentialsError,
    InvalidStatusError,
    OrderNotFoundError,
    PermissionDeniedError,
    ShopNotFoundError,
    StatusVerificationError,
    ValidationError,
)
from ..core.security import security_manager
from ..models.order import ADMIN_STATUSES, Order, OrderHistory
from ..utils.order_lifecycle import utc_now

logger = logging.getLogger(__name__)


def _has_shop_items(order: Dict[str, Any], shop_name: str) -> bool:
    return any(item.get("shop_name") == shop_name for item in order.get("items") or [])


class AdminService:
    """Shop staff operations"""

    def __init__(self):
        self.db = db_manager

    def setup_credentials(self, shop_name: str, username: str, password: str) -> Dict[str, Any]:
        """
        Create the admin login of a shop

        Raises:
            ValidationError: a field is empty
            ShopNotFoundError: no shop with this name
            CredentialsExistError: shop or username already has credentials
        """
        if not shop_name or not username or not password:
            raise ValidationError("Shop name, username, and password are required")

        shop = self.db.execute_one("SELECT shop_id FROM shops WHERE shop_name = ?", [shop_name])
        if not shop:
            raise ShopNotFoundError(f"Shop '{shop_name}' not found")

        existing = self.db.execute_one(
            "SELECT credential_id FROM admin_credentials WHERE shop_name = ? OR admin_username = ?",
            [shop_name, username],
        )
        if existing:
            raise CredentialsExistError(shop_name)

        row = self.db.execute_one(
            """
            INSERT INTO admin_credentials(shop_name, admin_username, password_hash, is_active)
            VALUES (?, ?, ?, TRUE) RETURNING credential_id
            """,
            [shop_name, username, security_manager.hash_password(password)],
        )
        self.db.log_action(None, username, "admin_credentials_created", {"shop_name": shop_name})
        logger.info("Admin credentials created for shop %s", shop_name)
        return {"credential_id": row[0], "shop_name": shop_name, "username": username}

    def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue an admin token

        Raises:
            InvalidCredentialsError: unknown user or wrong password
            AccountInactiveError: the account is disabled
        """
        cred = self.db.fetch_dict(
            "SELECT credential_id, shop_name, admin_username, password_hash, is_active "
            "FROM admin_credentials WHERE admin_username = ?",
            [username],
        )
        if not cred or not security_manager.verify_password(password, cred["password_hash"]):
            logger.warning("Failed admin login for %s", username)
            raise InvalidCredentialsError()
        if not cred["is_active"]:
            raise AccountInactiveError()

        now = utc_now()
        self.db.execute_query(
            "UPDATE admin_credentials SET last_login = ? WHERE credential_id = ?",
            [now, cred["credential_id"]],
        )
        self.db.log_action(None, username, "admin_login", {"shop_name": cred["shop_name"]})

        return {
            "token": security_manager.create_admin_token(username, cred["shop_name"]),
            "shop_name": cred["shop_name"],
            "username": username,
            "login_time": now.isoformat(),
        }

    def list_orders(self, order_type: str = "active", shop_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Orders newest first, restricted to those with items from the shop"""
        if order_type == "active":
            rows = self.db.fetch_dicts("SELECT * FROM orders ORDER BY created_at DESC")
            orders = [Order.from_row(row).model_dump(mode="json") for row in rows]
        elif order_type == "history":
            rows = self.db.fetch_dicts("SELECT * FROM order_history ORDER BY created_at DESC")
            orders = [OrderHistory.from_row(row).model_dump(mode="json") for row in rows]
        else:
            raise ValidationError("Invalid type. Use 'active' or 'history'", {"type": order_type})

        if shop_name:
            orders = [o for o in orders if _has_shop_items(o, shop_name)]
        return orders

    def update_order_status(self, order_id: int, status: str,
                            actor: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Set an order's status and confirm the write

        Args:
            order_id: order to update
            status: one of ADMIN_STATUSES
            actor: admin from the token ({'username', 'shop_name'})

        Raises:
            InvalidStatusError: status outside the allowed list
            OrderNotFoundError: no such order
            PermissionDeniedError: order has no items from the admin's shop
            StatusVerificationError: read-back did not match
        """
        if status not in ADMIN_STATUSES:
            raise InvalidStatusError(status)

        row = self.db.fetch_dict("SELECT * FROM orders WHERE order_id = ?", [order_id])
        if not row:
            raise OrderNotFoundError()
        order = Order.from_row(row)

        shop_name = (actor or {}).get("shop_name")
        if actor is not None and not _has_shop_items(order.model_dump(), shop_name):
            raise PermissionDeniedError("Order does not contain items from your shop")

        now = utc_now()
        with self.db.transaction() as conn:
            conn.execute(
                "UPDATE orders SET status = ?, updated_at = ? WHERE order_id = ?",
                [status, now, order_id],
            )

        updated = self.db.fetch_dict("SELECT status, updated_at FROM orders WHERE order_id = ?", [order_id])
        if not updated or updated["status"] != status:
            raise StatusVerificationError(status, updated["status"] if updated else None)

        username = (actor or {}).get("username")
        self.db.log_action(order.user_id, username, "order_status_update", {
            "order_id": order_id,
            "old_status": order.status,
            "new_status": status,
        })
        logger.info("Order %s status %s -> %s by %s", order_id, order.status, status, username)

        return {
            "order_id": order_id,
            "old_status": order.status,
            "new_status": status,
            "updated_at": updated["updated_at"].isoformat(),
        }


# Global service instance
admin_service = AdminService()
