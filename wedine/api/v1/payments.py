"""
Payment routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.error_handler import create_success_response
from ...core.security import get_current_user
from ...schemas.payment import VerifyPaymentRequest
from ...services.payment_service import payment_service

router = APIRouter()


@router.post("/verify-and-update")
def verify_and_update(req: VerifyPaymentRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Verify the checkout signature and mark the order paid"""
    result = payment_service.verify_and_update(
        req.razorpay_order_id,
        req.razorpay_payment_id,
        req.razorpay_signature,
    )
    return create_success_response(result, "Payment verified and order completed successfully")
