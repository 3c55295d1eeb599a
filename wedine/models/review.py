"""
Review data model
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseEntity


class Review(BaseEntity):
    review_id: Optional[int] = None
    shop_id: int
    user_name: str
    user_email: str
    rating: int = Field(..., ge=1, le=5)
    review_text: str
    is_verified: bool = False
    helpful_count: int = 0
    created_at: Optional[datetime] = None
