"""
Notification service
SMS alerts to shop owners through the Twilio Messages REST API

Main features:
- Stock-over alert when an item runs out
- New-order alert with each shop's share of a paid order
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import FoodNotFoundError

logger = logging.getLogger(__name__)


class SmsGateway:
    """Minimal Twilio client: one send call"""

    timeout = 10

    def is_configured(self) -> bool:
        return bool(settings.twilio_account_sid and settings.twilio_auth_token
                    and settings.twilio_phone_number)

    def send_sms(self, to: str, body: str) -> Dict[str, Any]:
        if not self.is_configured():
            return {"success": False, "error": "SMS gateway not configured"}

        url = f"{settings.twilio_api_base}/Accounts/{settings.twilio_account_sid}/Messages.json"
        try:
            response = requests.post(
                url,
                data={"To": to, "From": settings.twilio_phone_number, "Body": body},
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("SMS to %s failed: %s", to, e)
            return {"success": False, "error": str(e)}

        if response.status_code >= 400:
            error = data.get("message") or f"HTTP {response.status_code}"
            logger.warning("SMS to %s rejected: %s", to, error)
            return {"success": False, "error": error}

        logger.info("SMS sent to %s, sid %s", to, data.get("sid"))
        return {"success": True, "sid": data.get("sid")}


class NotificationService:
    """Shop owner notifications"""

    def __init__(self, gateway: Optional[SmsGateway] = None):
        self.db = db_manager
        self.gateway = gateway or SmsGateway()

    def send_stock_over_notification(self, shop_name: Optional[str], food_name: Optional[str],
                                     owner_mobile: Optional[str]) -> Dict[str, Any]:
        """
        Tell a shop owner that an item is out of stock

        Returns:
            dict: success, message and the SMS result when one was attempted
        """
        if not food_name or not shop_name:
            return {
                "success": False,
                "message": "Missing required data",
                "details": {"food_name": bool(food_name), "shop_name": bool(shop_name)},
            }

        if not owner_mobile:
            return {
                "success": False,
                "message": "No mobile number available for notifications",
                "details": {"food_name": food_name, "shop_name": shop_name},
            }

        body = f"STOCK ALERT: {food_name} is out of stock at {shop_name}. Please restock immediately!"
        sms = self.gateway.send_sms(owner_mobile, body)
        return {
            "success": bool(sms.get("success")),
            "message": "SMS notification sent successfully" if sms.get("success") else "SMS notification failed",
            "details": {"food_name": food_name, "shop_name": shop_name, "sms": sms},
        }

    def notify_food_out_of_stock(self, food_id: int) -> Dict[str, Any]:
        """
        Look up the item's shop and send the stock-over alert

        Raises:
            FoodNotFoundError: unknown food item
        """
        row = self.db.fetch_dict(
            """
            SELECT f.food_name, s.shop_name, s.owner_mobile
            FROM food_items f LEFT JOIN shops s ON s.shop_id = f.shop_id
            WHERE f.food_id = ?
            """,
            [food_id],
        )
        if not row:
            raise FoodNotFoundError(food_id)
        return self.send_stock_over_notification(row["shop_name"], row["food_name"], row["owner_mobile"])

    def notify_shop_owners(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send each shop owner the amount of a new order that belongs to them

        Args:
            order: order dict whose items carry shop_id, price and quantity

        Returns:
            dict: {shop_id: sms result}
        """
        totals: Dict[int, int] = {}
        for item in order.get("items") or []:
            totals[item["shop_id"]] = totals.get(item["shop_id"], 0) + item["price"] * item["quantity"]

        results = {}
        for shop_id, amount_paise in totals.items():
            shop = self.db.fetch_dict("SELECT shop_name, owner_mobile FROM shops WHERE shop_id = ?", [shop_id])
            if not shop or not shop.get("owner_mobile"):
                results[shop_id] = {"success": False, "error": "No mobile number"}
                continue
            body = f"You have a new order. Amount: ₹{amount_paise / 100:.2f}"
            results[shop_id] = self.gateway.send_sms(shop["owner_mobile"], body)
        return results


# Global service instance
notification_service = NotificationService()
