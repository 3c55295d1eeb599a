"""
Order service
Order placement and the customer's order queries

Main features:
- Catalog-priced order creation for COD and online payment
- Heuristic duplicate prevention (same user, method and food names
  within the duplicate window)
- Cleanup of the user's abandoned online orders before a new one is placed
- Active / history listings

Business rules:
- Prices always come from the catalog
- COD orders get a history record at placement
- Online orders get their history record once payment is verified
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import (
    DuplicateOrderError,
    FoodNotFoundError,
    OrderNotFoundError,
    PaymentGatewayError,
    ValidationError,
)
from ..models.order import (
    HISTORY_INSERT_SQL,
    ORDER_INSERT_SQL,
    Order,
    OrderHistory,
    OrderItem,
    OrderStatus,
    PaymentDetails,
    PaymentMethod,
)
from ..models.base import load_json
from ..utils.order_lifecycle import (
    PAYMENT_METHODS,
    calculate_expiry_date,
    generate_unique_order_identifier,
    items_signature,
    sanitize_order_identifier,
    utc_now,
    validate_order_data,
)
from ..utils.pricing import calculate_payment_splits, calculate_total_amount
from .payment_service import razorpay_gateway

logger = logging.getLogger(__name__)

COD_NOTES = "COD order created - pending payment on delivery"


class OrderService:
    """Order placement and lookup"""

    def __init__(self, gateway=None):
        self.db = db_manager
        self.gateway = gateway or razorpay_gateway

    def create_order(self, user: Dict[str, Any], cart_items: List[Dict[str, Any]],
                     payment_method: str, user_details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Place an order

        Args:
            user: signed-in user ({'user_id', 'email'})
            cart_items: [{'food_id', 'quantity'}]
            payment_method: 'cod' or 'online'
            user_details: optional {'email', 'name', 'phone'}

        Returns:
            dict: online orders carry the gateway order id and key for checkout

        Raises:
            ValidationError: empty cart, missing user or unknown method
            FoodNotFoundError: a cart line names an unknown food item
            DuplicateOrderError: a similar order was placed moments ago
            PaymentGatewayError: gateway order could not be created
        """
        user_details = user_details or {}
        user_id = (user or {}).get("user_id")

        if not cart_items:
            raise ValidationError("Cart items are required")
        if not user_id:
            raise ValidationError("User details are required")
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError("Valid payment method is required (cod or online)")

        order_items = self._price_items(cart_items)
        now = utc_now()

        order_identifier = sanitize_order_identifier(
            generate_unique_order_identifier(user_id, order_items, payment_method, now)
        )

        duplicate = self.check_for_duplicate_order(user_id, order_items, payment_method, now=now)
        if duplicate:
            logger.info("Duplicate order blocked for user %s: %s", user_id, duplicate["existing_order_id"])
            raise DuplicateOrderError(
                "Duplicate order detected. Please wait before placing another order.",
                duplicate,
            )

        self._delete_pending_orders(user_id, now)

        subtotal = sum(item["price"] * item["quantity"] for item in order_items)
        amounts = calculate_total_amount(subtotal)
        shops = self._shops_for(order_items)
        splits = calculate_payment_splits(order_items, shops)

        is_valid, errors = validate_order_data({
            "user_id": user_id,
            "items": order_items,
            "payment_method": payment_method,
            "total_paise": amounts["total"],
            "order_identifier": order_identifier,
        })
        if not is_valid:
            raise ValidationError("Invalid order data", {"errors": errors})

        order = Order(
            user_id=user_id,
            user_email=user_details.get("email") or user.get("email"),
            user_phone=user_details.get("phone"),
            order_identifier=order_identifier,
            items=order_items,
            subtotal_paise=amounts["subtotal"],
            tax_paise=amounts["tax"],
            delivery_fee_paise=amounts["delivery_fee"],
            total_paise=amounts["total"],
            payment_method=payment_method,
            status=OrderStatus.ORDERED,
            payment_details=PaymentDetails(splits=splits),
            expires_at=calculate_expiry_date(now, settings.order_retention_hours),
            created_at=now,
            updated_at=now,
        )

        if payment_method == PaymentMethod.ONLINE.value:
            result = self._create_online_order(order, splits)
        else:
            result = self._create_cod_order(order)

        self.db.log_action(user_id, user_id, "order_create", {
            "order_id": result["order_id"],
            "order_identifier": order_identifier,
            "payment_method": payment_method,
            "items": [{"food_id": i["food_id"], "quantity": i["quantity"]} for i in order_items],
            **amounts,
        })
        logger.info("Order %s created for user %s (%s, %s paise)",
                    result["order_id"], user_id, payment_method, amounts["total"])
        return result

    def _create_online_order(self, order: Order, splits: List[Dict[str, Any]]) -> Dict[str, Any]:
        gateway_result = self.gateway.create_order(
            order.total_paise,
            settings.currency,
            receipt=order.order_identifier,
            notes={
                "order_type": "multi-vendor",
                "total_shops": len(splits),
                "user_id": order.user_id,
            },
        )
        if not gateway_result.get("success"):
            raise PaymentGatewayError("Failed to create Razorpay order", {"error": gateway_result.get("error")})

        order.payment_details.razorpay_order_id = gateway_result["order_id"]
        row = self.db.execute_one(ORDER_INSERT_SQL, order.insert_params())

        return {
            "order_id": row[0],
            "razorpay_order_id": gateway_result["order_id"],
            "order_identifier": order.order_identifier,
            "amount": order.total_paise,
            "splits": splits,
            "key_id": settings.razorpay_key_id,
        }

    def _create_cod_order(self, order: Order) -> Dict[str, Any]:
        with self.db.transaction() as conn:
            order_id = conn.execute(ORDER_INSERT_SQL, order.insert_params()).fetchone()[0]
            history = OrderHistory(
                original_order_id=order_id,
                user_id=order.user_id,
                user_email=order.user_email,
                order_identifier=order.order_identifier,
                items=order.items,
                total_paise=order.total_paise,
                payment_method=order.payment_method,
                status=order.status,
                order_status=False,
                payment_status=False,
                payment_details=order.payment_details,
                lifecycle_notes=COD_NOTES,
                archived_at=None,
                created_at=order.created_at,
                updated_at=order.updated_at,
            )
            conn.execute(HISTORY_INSERT_SQL, history.insert_params())

        return {
            "order_id": order_id,
            "order_identifier": order.order_identifier,
            "amount": order.total_paise,
        }

    def _price_items(self, cart_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Resolve cart lines against the catalog"""
        items = []
        for line in cart_items:
            quantity = int(line.get("quantity") or 0)
            if quantity < 1:
                raise ValidationError("Quantity must be at least 1", {"food_id": line.get("food_id")})
            food = self.db.fetch_dict(
                """
                SELECT f.food_id, f.food_name, f.price_paise, f.shop_id, s.shop_name
                FROM food_items f LEFT JOIN shops s ON s.shop_id = f.shop_id
                WHERE f.food_id = ?
                """,
                [line.get("food_id")],
            )
            if not food:
                raise FoodNotFoundError(line.get("food_id"))
            items.append(OrderItem(
                food_id=food["food_id"],
                food_name=food["food_name"],
                quantity=quantity,
                price=food["price_paise"],
                shop_id=food["shop_id"],
                shop_name=food["shop_name"] or "",
            ).model_dump())
        return items

    def _shops_for(self, order_items: List[Dict[str, Any]]) -> Dict[int, Dict[str, Any]]:
        shop_ids = sorted({item["shop_id"] for item in order_items})
        placeholders = ",".join("?" for _ in shop_ids)
        rows = self.db.fetch_dicts(
            f"SELECT shop_id, shop_name, owner_mobile FROM shops WHERE shop_id IN ({placeholders})",
            shop_ids,
        )
        return {row["shop_id"]: row for row in rows}

    def check_for_duplicate_order(self, user_id: str, items: List[Dict[str, Any]], payment_method: str,
                                  window_minutes: Optional[int] = None,
                                  now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """
        Look for a recent order with the same food names

        Returns:
            dict: existing_order_id, created_at, total, message; None when clear
        """
        window = window_minutes or settings.duplicate_window
        now = now or utc_now()
        cutoff = now - timedelta(minutes=window)

        rows = self.db.fetch_dicts(
            """
            SELECT order_id, created_at, items_json, total_paise
            FROM orders
            WHERE user_id = ? AND payment_method = ? AND created_at >= ?
            ORDER BY created_at DESC
            """,
            [user_id, payment_method, cutoff],
        )

        signature = items_signature(items)
        for row in rows:
            if items_signature(load_json(row["items_json"], [])) == signature:
                return {
                    "existing_order_id": row["order_id"],
                    "created_at": row["created_at"],
                    "total": row["total_paise"],
                    "message": f"Duplicate order detected. You placed a similar order within the last {window} minutes.",
                }
        return None

    def find_pending_orders_to_cleanup(self, user_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """The user's online orders that were never paid and have timed out"""
        now = now or utc_now()
        cutoff = now - timedelta(minutes=settings.pending_order_timeout_minutes)
        return self.db.fetch_dicts(
            """
            SELECT order_id, order_identifier, created_at
            FROM orders
            WHERE user_id = ? AND payment_method = 'online' AND payment_status = FALSE
              AND is_archived = FALSE AND created_at < ?
            ORDER BY created_at
            """,
            [user_id, cutoff],
        )

    def _delete_pending_orders(self, user_id: str, now: datetime):
        for pending in self.find_pending_orders_to_cleanup(user_id, now):
            self.db.execute_query("DELETE FROM orders WHERE order_id = ?", [pending["order_id"]])
            logger.info("Removed abandoned order %s of user %s", pending["order_id"], user_id)

    def list_user_orders(self, user_id: str, order_type: str = "active") -> List[Dict[str, Any]]:
        """Newest first; 'active' reads orders, 'history' reads order_history"""
        if order_type == "active":
            rows = self.db.fetch_dicts(
                "SELECT * FROM orders WHERE user_id = ? AND is_archived = FALSE ORDER BY created_at DESC",
                [user_id],
            )
            return [Order.from_row(row).model_dump(mode="json") for row in rows]
        if order_type == "history":
            rows = self.db.fetch_dicts(
                "SELECT * FROM order_history WHERE user_id = ? ORDER BY created_at DESC",
                [user_id],
            )
            return [OrderHistory.from_row(row).model_dump(mode="json") for row in rows]
        raise ValidationError("Invalid type. Use 'active' or 'history'", {"type": order_type})

    def get_order(self, order_id: int, user_id: str) -> Dict[str, Any]:
        row = self.db.fetch_dict("SELECT * FROM orders WHERE order_id = ? AND user_id = ?", [order_id, user_id])
        if not row:
            raise OrderNotFoundError()
        return Order.from_row(row).model_dump(mode="json")


# Global service instance
order_service = OrderService()
