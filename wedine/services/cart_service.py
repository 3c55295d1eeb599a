"""
Cart service
Per-user cart lines priced from the catalog
"""

import logging
from typing import Any, Dict, List

from ..core.database import db_manager
from ..core.exceptions import CartItemNotFoundError, FoodNotFoundError, ValidationError

logger = logging.getLogger(__name__)

CART_SELECT = """
SELECT c.cart_item_id, c.user_id, c.food_id, c.quantity, c.price_paise, c.created_at,
       f.food_name, f.image_url, f.price_paise AS current_price_paise,
       s.shop_id, s.shop_name
FROM cart_items c
LEFT JOIN food_items f ON f.food_id = c.food_id
LEFT JOIN shops s ON s.shop_id = f.shop_id
"""


class CartService:
    """Cart operations; every call is scoped to the owning user"""

    def __init__(self):
        self.db = db_manager

    def add_item(self, user_id: str, food_id: int, quantity: int = 1) -> Dict[str, Any]:
        """Add units of a food item, merging with an existing line"""
        if quantity is None or quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        food = self.db.execute_one("SELECT price_paise FROM food_items WHERE food_id = ?", [food_id])
        if not food:
            raise FoodNotFoundError(food_id)
        price = food[0]

        with self.db.transaction() as conn:
            existing = conn.execute(
                "SELECT cart_item_id FROM cart_items WHERE user_id = ? AND food_id = ?",
                [user_id, food_id],
            ).fetchone()
            if existing:
                cart_item_id = existing[0]
                conn.execute(
                    "UPDATE cart_items SET quantity = quantity + ?, price_paise = ? WHERE cart_item_id = ?",
                    [quantity, price, cart_item_id],
                )
            else:
                cart_item_id = conn.execute(
                    "INSERT INTO cart_items(user_id, food_id, quantity, price_paise) VALUES (?,?,?,?) "
                    "RETURNING cart_item_id",
                    [user_id, food_id, quantity, price],
                ).fetchone()[0]

        return self._get_item(user_id, cart_item_id)

    def decrement_item(self, user_id: str, cart_item_id: int) -> Dict[str, Any]:
        """Drop one unit; the line is deleted when its last unit goes"""
        item = self._get_item(user_id, cart_item_id)
        if item["quantity"] > 1:
            self.db.execute_query(
                "UPDATE cart_items SET quantity = quantity - 1 WHERE cart_item_id = ?", [cart_item_id]
            )
            return {"deleted": False, "cart_item": self._get_item(user_id, cart_item_id)}

        self.db.execute_query("DELETE FROM cart_items WHERE cart_item_id = ?", [cart_item_id])
        return {"deleted": True, "cart_item": None}

    def remove_item(self, user_id: str, cart_item_id: int) -> Dict[str, Any]:
        self._get_item(user_id, cart_item_id)
        self.db.execute_query("DELETE FROM cart_items WHERE cart_item_id = ?", [cart_item_id])
        return {"deleted": True}

    def list_items(self, user_id: str) -> List[Dict[str, Any]]:
        return self.db.fetch_dicts(CART_SELECT + " WHERE c.user_id = ? ORDER BY c.created_at, c.cart_item_id",
                                   [user_id])

    def clear(self, user_id: str) -> int:
        """Empty the cart; returns how many lines were removed"""
        removed = self.db.execute_query(
            "DELETE FROM cart_items WHERE user_id = ? RETURNING cart_item_id", [user_id]
        )
        logger.info("Cleared %d cart items for user %s", len(removed), user_id)
        return len(removed)

    def _get_item(self, user_id: str, cart_item_id: int) -> Dict[str, Any]:
        item = self.db.fetch_dict(CART_SELECT + " WHERE c.cart_item_id = ? AND c.user_id = ?",
                                  [cart_item_id, user_id])
        if not item:
            raise CartItemNotFoundError()
        return item


# Global service instance
cart_service = CartService()
