"""
Notification routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.error_handler import create_success_response
from ...core.exceptions import NotificationError
from ...core.security import get_current_user
from ...schemas.notification import StockOverNotificationRequest
from ...services.notification_service import notification_service

router = APIRouter()


@router.post("")
def send_stock_over(req: StockOverNotificationRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """Alert the shop owner that an item ran out"""
    result = notification_service.notify_food_out_of_stock(req.food_id)
    if not result["success"]:
        raise NotificationError(result["message"], result.get("details"))
    return create_success_response(result, result["message"])
