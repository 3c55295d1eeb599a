"""
Review service
Shop reviews with sorting, rating filter, statistics and helpful votes
"""

import logging
import math
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import ReviewNotFoundError, ShopNotFoundError, ValidationError
from ..models.review import Review
from ..utils.order_lifecycle import utc_now

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "newest": "r.created_at DESC, r.review_id DESC",
    "rating": "r.rating DESC, r.created_at DESC, r.review_id DESC",
    "helpful": "r.helpful_count DESC, r.created_at DESC, r.review_id DESC",
}


def _rating_filter(value: Optional[str]) -> Optional[int]:
    """'1'..'5' narrows to one rating; anything else means all"""
    if value is None or value == "all":
        return None
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return None
    return rating if 1 <= rating <= 5 else None


class ReviewService:
    """Review queries and writes"""

    def __init__(self):
        self.db = db_manager

    def create_review(self, user_name: str, user_email: str, shop_id: int, rating: int,
                      review_text: str) -> Dict[str, Any]:
        if not user_name or not user_email or not shop_id or not rating or not review_text:
            raise ValidationError("Missing required fields")
        if rating < 1 or rating > 5:
            raise ValidationError("Rating must be between 1 and 5", {"rating": rating})
        if len(review_text) < 10 or len(review_text) > 500:
            raise ValidationError("Review text must be between 10 and 500 characters",
                                  {"length": len(review_text)})
        if not self.db.execute_one("SELECT 1 FROM shops WHERE shop_id = ?", [shop_id]):
            raise ShopNotFoundError()

        review = Review(shop_id=shop_id, user_name=user_name, user_email=user_email, rating=rating,
                        review_text=review_text, created_at=utc_now())
        row = self.db.execute_one(
            """
            INSERT INTO reviews(shop_id, user_name, user_email, rating, review_text,
                                is_verified, helpful_count, created_at)
            VALUES (?,?,?,?,?,?,?,?) RETURNING review_id
            """,
            [review.shop_id, review.user_name, review.user_email, review.rating, review.review_text,
             review.is_verified, review.helpful_count, review.created_at],
        )
        logger.info("Review %s created for shop %s", row[0], shop_id)
        return {"review_id": row[0]}

    def list_reviews(self, shop_id: Optional[int] = None, page: int = 1, sort: str = "newest",
                     rating_filter: Optional[str] = "all") -> Dict[str, Any]:
        """
        One page of reviews plus statistics

        The rating filter narrows the page and the total; the average and the
        distribution always cover every review of the shop.
        """
        per_page = settings.reviews_per_page
        page = max(1, page or 1)
        order_by = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])

        base_where = []
        base_params = []
        if shop_id is not None:
            base_where.append("r.shop_id = ?")
            base_params.append(shop_id)

        where = list(base_where)
        params = list(base_params)
        rating = _rating_filter(rating_filter)
        if rating is not None:
            where.append("r.rating = ?")
            params.append(rating)

        where_sql = (" WHERE " + " AND ".join(where)) if where else ""
        reviews = self.db.fetch_dicts(
            f"""
            SELECT r.*, s.shop_name
            FROM reviews r LEFT JOIN shops s ON s.shop_id = r.shop_id
            {where_sql}
            ORDER BY {order_by}
            LIMIT ? OFFSET ?
            """,
            params + [per_page, (page - 1) * per_page],
        )
        total = self.db.execute_one(f"SELECT COUNT(*) FROM reviews r{where_sql}", params)[0]

        base_sql = (" WHERE " + " AND ".join(base_where)) if base_where else ""
        counts = self.db.execute_query(
            f"SELECT r.rating, COUNT(*) FROM reviews r{base_sql} GROUP BY r.rating", base_params
        )
        distribution = {str(r): 0 for r in range(5, 0, -1)}
        rated = 0
        rating_sum = 0
        for value, count in counts:
            distribution[str(value)] = count
            rated += count
            rating_sum += value * count
        average = math.floor(rating_sum * 10 / rated + 0.5) / 10 if rated else 0

        return {
            "reviews": reviews,
            "stats": {
                "total_reviews": total,
                "average_rating": average,
                "rating_distribution": distribution,
            },
            "pagination": {
                "page": page,
                "has_more": len(reviews) == per_page,
                "total_pages": math.ceil(total / per_page),
            },
        }

    def vote_helpful(self, review_id: int, action: str = "increment") -> Dict[str, Any]:
        if action not in ("increment", "decrement"):
            raise ValidationError('Invalid action. Must be "increment" or "decrement"', {"action": action})

        row = self.db.execute_one("SELECT helpful_count FROM reviews WHERE review_id = ?", [review_id])
        if not row:
            raise ReviewNotFoundError()

        current = row[0] or 0
        new_count = current + 1 if action == "increment" else max(0, current - 1)
        self.db.execute_query("UPDATE reviews SET helpful_count = ? WHERE review_id = ?", [new_count, review_id])
        return {"review_id": review_id, "helpful_count": new_count}


# Global service instance
review_service = ReviewService()
