"""
Notification request schemas
"""

from pydantic import BaseModel, Field


class StockOverNotificationRequest(BaseModel):
    food_id: int = Field(..., description="food item that ran out")
