"""
Catalog data models: shops, categories and food items
"""

from typing import Optional

from pydantic import Field

from .base import BaseEntity, TimestampMixin


class Shop(BaseEntity):
    """Vendor with the contact data used for notifications and payment splits"""
    shop_id: Optional[int] = None
    shop_name: str
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_mobile: Optional[str] = None
    worker_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Category(BaseEntity):
    category_id: Optional[int] = None
    category_name: str
    description: Optional[str] = None


class FoodItem(BaseEntity, TimestampMixin):
    food_id: Optional[int] = None
    food_name: str
    shop_id: int
    category_id: Optional[int] = None
    price_paise: int = Field(..., ge=0)
    food_type: Optional[str] = None
    quantity: int = Field(0, description="units in stock")
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    spicy_level: Optional[int] = None
    preparation_time: Optional[int] = None
