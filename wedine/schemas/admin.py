"""
Admin dashboard request schemas
"""

from pydantic import BaseModel, Field


class SetupCredentialsRequest(BaseModel):
    shop_name: str = Field("", description="shop the credentials belong to")
    username: str = Field("", description="admin username")
    password: str = Field("", description="plain password, stored hashed")


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UpdateOrderStatusRequest(BaseModel):
    """Status is checked against the allowed list in the service"""
    order_id: int
    status: str
