"""
Order request/response schemas
"""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from ..models.order import PaymentMethod


class CartLine(BaseModel):
    """One cart line submitted at checkout"""
    food_id: int = Field(..., description="food item id")
    quantity: int = Field(..., ge=1, description="units ordered")


class UserDetails(BaseModel):
    email: Optional[EmailStr] = Field(None, description="contact email")
    name: Optional[str] = Field(None, description="customer name")
    phone: Optional[str] = Field(None, description="contact phone")


class CreateOrderRequest(BaseModel):
    """Order creation request"""
    cart_items: List[CartLine] = Field(default_factory=list, description="items to order")
    payment_method: PaymentMethod = Field(..., description="cod or online")
    user_details: UserDetails = Field(default_factory=UserDetails)

    model_config = {
        "json_schema_extra": {
            "example": {
                "cart_items": [{"food_id": 1, "quantity": 2}],
                "payment_method": "online",
                "user_details": {"email": "student@example.edu", "name": "Asha", "phone": "+919800000000"},
            }
        }
    }

