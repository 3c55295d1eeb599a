"""
Payment verification schemas
"""

from typing import Optional

from pydantic import BaseModel, Field


class VerifyPaymentRequest(BaseModel):
    """Checkout callback fields; missing ones are rejected by the service"""
    razorpay_order_id: Optional[str] = Field(None, description="gateway order id")
    razorpay_payment_id: Optional[str] = Field(None, description="gateway payment id")
    razorpay_signature: Optional[str] = Field(None, description="HMAC-SHA256 signature")
