"""
Catalog service
Shops, categories and food items, and stock bookkeeping

Main features:
- Browsing with category / shop / name filters
- Catalog creation for shop staff
- Per-item stock reduction with a stock-over alert at zero
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.database import db_manager
from ..core.exceptions import FoodNotFoundError, ShopNotFoundError, ValidationError
from ..models.catalog import Category, FoodItem, Shop
from ..utils.order_lifecycle import utc_now
from .notification_service import notification_service

logger = logging.getLogger(__name__)

FOOD_SELECT = """
SELECT f.*, s.shop_name, c.category_name
FROM food_items f
LEFT JOIN shops s ON s.shop_id = f.shop_id
LEFT JOIN categories c ON c.category_id = f.category_id
"""


class CatalogService:
    """Catalog queries and stock updates"""

    def __init__(self):
        self.db = db_manager
        self.notifier = notification_service

    def list_shops(self) -> List[Dict[str, Any]]:
        return self.db.fetch_dicts("SELECT * FROM shops ORDER BY shop_name")

    def list_categories(self) -> List[Dict[str, Any]]:
        return self.db.fetch_dicts("SELECT * FROM categories ORDER BY category_name")

    def list_food_items(self, category_id: Optional[int] = None, shop_id: Optional[int] = None,
                        search: Optional[str] = None) -> List[Dict[str, Any]]:
        clauses = []
        params: List[Any] = []
        if category_id is not None:
            clauses.append("f.category_id = ?")
            params.append(category_id)
        if shop_id is not None:
            clauses.append("f.shop_id = ?")
            params.append(shop_id)
        if search:
            clauses.append("lower(f.food_name) LIKE ?")
            params.append(f"%{search.lower()}%")

        query = FOOD_SELECT
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY f.food_name"
        return self.db.fetch_dicts(query, params)

    def get_food_item(self, food_id: int) -> Dict[str, Any]:
        item = self.db.fetch_dict(FOOD_SELECT + " WHERE f.food_id = ?", [food_id])
        if not item:
            raise FoodNotFoundError(food_id)
        return item

    def create_shop(self, data: Dict[str, Any]) -> Dict[str, Any]:
        shop = Shop.model_validate(data)
        if self.db.execute_one("SELECT 1 FROM shops WHERE shop_name = ?", [shop.shop_name]):
            raise ValidationError("Shop already exists", {"shop_name": shop.shop_name})
        row = self.db.execute_one(
            """
            INSERT INTO shops(shop_name, owner_name, owner_email, owner_mobile, worker_name, latitude, longitude)
            VALUES (?,?,?,?,?,?,?) RETURNING shop_id
            """,
            [shop.shop_name, shop.owner_name, shop.owner_email, shop.owner_mobile,
             shop.worker_name, shop.latitude, shop.longitude],
        )
        logger.info("Shop %s created: %s", row[0], shop.shop_name)
        return self.db.fetch_dict("SELECT * FROM shops WHERE shop_id = ?", [row[0]])

    def create_category(self, data: Dict[str, Any]) -> Dict[str, Any]:
        category = Category.model_validate(data)
        if self.db.execute_one("SELECT 1 FROM categories WHERE category_name = ?", [category.category_name]):
            raise ValidationError("Category already exists", {"category_name": category.category_name})
        row = self.db.execute_one(
            "INSERT INTO categories(category_name, description) VALUES (?,?) RETURNING category_id",
            [category.category_name, category.description],
        )
        return self.db.fetch_dict("SELECT * FROM categories WHERE category_id = ?", [row[0]])

    def create_food_item(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        food = FoodItem.model_validate({**data, "created_at": now, "updated_at": now})
        if not self.db.execute_one("SELECT 1 FROM shops WHERE shop_id = ?", [food.shop_id]):
            raise ShopNotFoundError()
        if food.category_id is not None and not self.db.execute_one(
                "SELECT 1 FROM categories WHERE category_id = ?", [food.category_id]):
            raise ValidationError("Category not found", {"category_id": food.category_id})

        row = self.db.execute_one(
            """
            INSERT INTO food_items(food_name, shop_id, category_id, price_paise, food_type, quantity,
                                   description, image_url, is_vegetarian, is_vegan, spicy_level,
                                   preparation_time, created_at, updated_at)
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?) RETURNING food_id
            """,
            [food.food_name, food.shop_id, food.category_id, food.price_paise, food.food_type,
             food.quantity, food.description, food.image_url, food.is_vegetarian, food.is_vegan,
             food.spicy_level, food.preparation_time, food.created_at, food.updated_at],
        )
        return self.get_food_item(row[0])

    def reduce_stock(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Decrement stock item by item

        Unknown items and short stock are reported in errors; the other
        items are still updated.

        Returns:
            dict: {'updates': [...], 'errors': [...]}
        """
        updates = []
        errors = []
        for item in items:
            food_id = item["food_id"]
            quantity = item["quantity"]
            food = self.db.fetch_dict(
                """
                SELECT f.food_id, f.food_name, f.quantity, s.shop_name, s.owner_mobile
                FROM food_items f LEFT JOIN shops s ON s.shop_id = f.shop_id
                WHERE f.food_id = ?
                """,
                [food_id],
            )
            if not food:
                errors.append(f"Food item {food_id} not found")
                continue

            current = food["quantity"] or 0
            if current < quantity:
                errors.append(
                    f"Insufficient stock for {food['food_name']}. Available: {current}, Requested: {quantity}"
                )
                continue

            new_stock = max(0, current - quantity)
            self.db.execute_query(
                "UPDATE food_items SET quantity = ?, updated_at = ? WHERE food_id = ?",
                [new_stock, utc_now(), food_id],
            )
            updates.append({
                "food_id": food_id,
                "food_name": food["food_name"],
                "previous_stock": current,
                "new_stock": new_stock,
                "reduced_by": quantity,
            })

            if new_stock == 0:
                result = self.notifier.send_stock_over_notification(
                    food["shop_name"], food["food_name"], food["owner_mobile"]
                )
                logger.info("Stock over for %s: %s", food["food_name"], result["message"])

        return {"updates": updates, "errors": errors}


# Global service instance
catalog_service = CatalogService()
