"""
Cart request schemas
"""

from pydantic import BaseModel, Field


class AddCartItemRequest(BaseModel):
    food_id: int = Field(..., description="food item id")
    quantity: int = Field(1, ge=1, description="units to add")


class CartItemRef(BaseModel):
    """Identifies one cart line of the current user"""
    cart_item_id: int = Field(..., description="cart line id")
