"""
Payment service
Razorpay order creation, payment lookup and signature verification, plus the
verify-and-update flow that marks an online order paid

Main features:
- Gateway calls over the Razorpay REST API (HTTP basic auth)
- Constant-time HMAC-SHA256 signature check
- Order and history record marked paid in one transaction
- Shop owners notified of their share once payment is verified
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import requests

from ..config.settings import settings
from ..core.database import db_manager
from ..core.exceptions import (
    InvalidSignatureError,
    OrderNotFoundError,
    PaymentAlreadyProcessedError,
    PaymentGatewayError,
    ValidationError,
)
from ..models.order import HISTORY_INSERT_SQL, Order, OrderHistory, OrderStatus, PaymentState
from ..utils.order_lifecycle import sanitize_order_identifier, utc_now
from .notification_service import notification_service

logger = logging.getLogger(__name__)

PAID_NOTES = "Payment verified and order completed"


class RazorpayGateway:
    """The three Razorpay calls the order flow needs"""

    timeout = 15

    def is_configured(self) -> bool:
        return bool(settings.razorpay_key_id and settings.razorpay_key_secret)

    def _auth(self):
        return (settings.razorpay_key_id, settings.razorpay_key_secret)

    def create_order(self, amount_paise: int, currency: str = None, receipt: str = None,
                     notes: Dict[str, Any] = None) -> Dict[str, Any]:
        """Create a gateway order; returns {success, order_id} or {success, error}"""
        if not self.is_configured():
            return {"success": False, "error": "Payment gateway not configured"}

        payload = {
            "amount": amount_paise,
            "currency": currency or settings.currency,
            "receipt": (receipt or "")[:40],
            "notes": notes or {},
        }
        try:
            response = requests.post(f"{settings.razorpay_api_base}/orders", json=payload,
                                     auth=self._auth(), timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Razorpay order creation failed: %s", e)
            return {"success": False, "error": str(e)}

        if response.status_code >= 400 or "id" not in data:
            error = (data.get("error") or {}).get("description") or f"HTTP {response.status_code}"
            logger.error("Razorpay order creation rejected: %s", error)
            return {"success": False, "error": error}

        return {"success": True, "order_id": data["id"]}

    def get_payment_details(self, payment_id: str) -> Dict[str, Any]:
        """Fetch a payment; returns {success, transaction_id, status, method}"""
        if not self.is_configured():
            return {"success": False, "error": "Payment gateway not configured"}

        try:
            response = requests.get(f"{settings.razorpay_api_base}/payments/{payment_id}",
                                    auth=self._auth(), timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Razorpay payment lookup failed: %s", e)
            return {"success": False, "error": str(e)}

        if response.status_code >= 400:
            error = (data.get("error") or {}).get("description") or f"HTTP {response.status_code}"
            return {"success": False, "error": error}

        return {
            "success": True,
            "transaction_id": data.get("id"),
            "status": data.get("status"),
            "method": data.get("method"),
        }

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        secret = settings.razorpay_key_secret
        if not secret or not signature:
            return False
        expected = hmac.new(
            secret.encode("utf-8"),
            f"{order_id}|{payment_id}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(expected, signature)


class PaymentService:
    """Payment verification"""

    def __init__(self, gateway: Optional[RazorpayGateway] = None):
        self.db = db_manager
        self.gateway = gateway or RazorpayGateway()
        self.notifier = notification_service

    def verify_and_update(self, razorpay_order_id: Optional[str], razorpay_payment_id: Optional[str],
                          razorpay_signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify a checkout callback and mark the order paid

        Returns:
            dict: order_id, order_identifier, payment_id, transaction_id

        Raises:
            ValidationError: a parameter is missing
            InvalidSignatureError: signature does not match
            PaymentGatewayError: payment details could not be fetched
            OrderNotFoundError: no order carries this gateway order id
            PaymentAlreadyProcessedError: the order is already paid
        """
        if not razorpay_order_id or not razorpay_payment_id or not razorpay_signature:
            raise ValidationError("Missing payment verification parameters")

        if not self.gateway.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            raise InvalidSignatureError()

        payment = self.gateway.get_payment_details(razorpay_payment_id)
        if not payment.get("success"):
            raise PaymentGatewayError("Failed to get payment details", {"error": payment.get("error")})

        row = self.db.fetch_dict(
            "SELECT * FROM orders WHERE json_extract_string(payment_details_json, '$.razorpay_order_id') = ?",
            [razorpay_order_id],
        )
        if not row:
            raise OrderNotFoundError()
        order = Order.from_row(row)

        if order.payment_status:
            raise PaymentAlreadyProcessedError(order.order_id, order.order_identifier)

        now = utc_now()
        details = order.payment_details.model_copy(update={
            "razorpay_order_id": razorpay_order_id,
            "razorpay_payment_id": razorpay_payment_id,
            "razorpay_signature": razorpay_signature,
            "transaction_id": payment.get("transaction_id") or "",
            "payment_status": PaymentState.COMPLETED.value,
            "paid_at": now,
        })
        details_json = details.model_dump_json()

        with self.db.transaction() as conn:
            # claims the order; a concurrent verification finds it already paid
            claimed = conn.execute(
                """
                UPDATE orders
                SET status = ?, payment_status = TRUE, order_status = TRUE,
                    payment_details_json = ?, updated_at = ?
                WHERE order_id = ? AND payment_status = FALSE
                RETURNING order_id
                """,
                [OrderStatus.PAID.value, details_json, now, order.order_id],
            ).fetchone()
            if not claimed:
                raise PaymentAlreadyProcessedError(order.order_id, order.order_identifier)

            history = conn.execute(
                "SELECT history_id FROM order_history WHERE original_order_id = ? OR order_identifier = ? LIMIT 1",
                [order.order_id, order.order_identifier],
            ).fetchone()

            if history:
                conn.execute(
                    """
                    UPDATE order_history
                    SET status = ?, payment_status = TRUE, order_status = TRUE,
                        payment_details_json = ?, lifecycle_notes = ?, updated_at = ?
                    WHERE history_id = ?
                    """,
                    [OrderStatus.PAID.value, details_json, PAID_NOTES, now, history[0]],
                )
            else:
                record = OrderHistory(
                    original_order_id=order.order_id,
                    user_id=order.user_id,
                    user_email=order.user_email,
                    order_identifier=sanitize_order_identifier(order.order_identifier),
                    items=order.items,
                    total_paise=order.total_paise,
                    payment_method=order.payment_method,
                    status=OrderStatus.PAID,
                    order_status=True,
                    payment_status=True,
                    payment_details=details,
                    lifecycle_notes=PAID_NOTES,
                    archived_at=None,
                    created_at=order.created_at,
                    updated_at=now,
                )
                conn.execute(HISTORY_INSERT_SQL, record.insert_params())

        self.db.log_action(order.user_id, order.user_id, "payment_verified", {
            "order_id": order.order_id,
            "razorpay_order_id": razorpay_order_id,
            "razorpay_payment_id": razorpay_payment_id,
            "total_paise": order.total_paise,
        })
        logger.info("Payment %s verified for order %s", razorpay_payment_id, order.order_id)

        self._notify_shops(order)

        return {
            "order_id": order.order_id,
            "order_identifier": sanitize_order_identifier(order.order_identifier),
            "payment_id": razorpay_payment_id,
            "transaction_id": payment.get("transaction_id"),
        }

    def _notify_shops(self, order: Order):
        try:
            results = self.notifier.notify_shop_owners(order.model_dump())
            failed = [shop_id for shop_id, r in results.items() if not r.get("success")]
            if failed:
                logger.warning("Order %s: shop notification failed for %s", order.order_id, failed)
        except Exception as e:
            logger.error("Order %s: shop notification error: %s", order.order_id, e)


# Global service instances
razorpay_gateway = RazorpayGateway()
payment_service = PaymentService(razorpay_gateway)
