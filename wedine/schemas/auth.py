"""
Authentication schemas
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class DevLoginRequest(BaseModel):
    """Development login"""
    user_id: str = Field(..., min_length=1, description="user id to sign in as")
    email: Optional[EmailStr] = Field(None, description="user email")

    model_config = {
        "json_schema_extra": {
            "example": {"user_id": "student-42", "email": "student42@example.edu"}
        }
    }


class LoginResponse(BaseModel):
    """Login response"""
    token: str = Field(description="JWT access token")
    token_type: str = Field(default="Bearer", description="token type")
    expires_in: int = Field(description="lifetime (seconds)")
