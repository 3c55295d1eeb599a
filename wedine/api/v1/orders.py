"""
Order routes
Placement, listings and the admin cleanup jobs
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ...core.error_handler import create_success_response
from ...core.exceptions import EndpointGoneError
from ...core.security import get_current_user, require_admin
from ...models.order import PaymentMethod
from ...schemas.order import CreateOrderRequest
from ...services.lifecycle_service import lifecycle_service
from ...services.order_service import order_service

router = APIRouter()


@router.post("/create-order")
def create_order(req: CreateOrderRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Place an order from cart lines"""
    result = order_service.create_order(
        user,
        [line.model_dump() for line in req.cart_items],
        req.payment_method.value,
        req.user_details.model_dump(),
    )
    if req.payment_method == PaymentMethod.ONLINE:
        message = "Order created successfully. Proceed with payment."
    else:
        message = "COD order placed successfully"
    return create_success_response(result, message)


@router.post("")
def legacy_create_order():
    """Replaced by /orders/create-order"""
    raise EndpointGoneError("This endpoint is deprecated. Use /orders/create-order instead.")


@router.get("")
def list_orders(
    order_type: str = Query("active", alias="type", description="active or history"),
    user: Dict[str, Any] = Depends(get_current_user),
):
    return create_success_response(order_service.list_user_orders(user["user_id"], order_type))


@router.post("/cleanup")
def cleanup_expired_orders(admin: Dict[str, Any] = Depends(require_admin)):
    """Archive orders past the retention window"""
    result = lifecycle_service.cleanup_expired_orders()
    return create_success_response(result, result["message"])


@router.get("/cleanup")
def cleanup_stats(admin: Dict[str, Any] = Depends(require_admin)):
    return create_success_response(lifecycle_service.get_cleanup_stats())


@router.post("/cleanup-duplicates")
def cleanup_duplicates(admin: Dict[str, Any] = Depends(require_admin)):
    result = lifecycle_service.cleanup_duplicates()
    return create_success_response(result, "Duplicate cleanup completed")


@router.get("/{order_id}")
def get_order(order_id: int, user: Dict[str, Any] = Depends(get_current_user)):
    return create_success_response(order_service.get_order(order_id, user["user_id"]))
