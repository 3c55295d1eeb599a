"""
Catalog request schemas
"""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class ShopCreateRequest(BaseModel):
    shop_name: str = Field(..., min_length=1)
    owner_name: Optional[str] = None
    owner_email: Optional[EmailStr] = None
    owner_mobile: Optional[str] = None
    worker_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CategoryCreateRequest(BaseModel):
    category_name: str = Field(..., min_length=1)
    description: Optional[str] = None


class FoodItemCreateRequest(BaseModel):
    food_name: str = Field(..., min_length=1)
    shop_id: int
    category_id: Optional[int] = None
    price_paise: int = Field(..., ge=0, description="unit price (paise)")
    food_type: Optional[str] = None
    quantity: int = Field(0, ge=0, description="initial stock")
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    spicy_level: Optional[int] = Field(None, ge=0, le=5)
    preparation_time: Optional[int] = Field(None, ge=0, description="minutes")


class StockReduction(BaseModel):
    food_id: int
    quantity: int = Field(..., ge=1)


class StockReductionRequest(BaseModel):
    """Stock decrement after an order is placed"""
    items: List[StockReduction] = Field(..., min_length=1)
