"""
Review request schemas
"""

from pydantic import BaseModel, EmailStr, Field


class ReviewCreateRequest(BaseModel):
    """Range checks on rating and text happen in the service"""
    user_name: str = Field(..., min_length=1)
    user_email: EmailStr
    shop_id: int
    rating: int
    review_text: str


class HelpfulVoteRequest(BaseModel):
    review_id: int
    action: str = Field("increment", description="increment or decrement")
