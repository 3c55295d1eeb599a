"""
Custom exception classes
Each business error carries a stable error code that maps to an HTTP status
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """Base class for all application errors"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class DatabaseError(BaseApplicationError):
    """Database failure"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "DATABASE_ERROR", details)


class ConcurrencyError(BaseApplicationError):
    """Write conflict reported by the database"""

    def __init__(self, message: str = "System busy, please retry"):
        super().__init__(message, "CONCURRENCY_CONFLICT")


class AuthenticationError(BaseApplicationError):
    """Missing, invalid or expired credentials"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class PermissionDeniedError(BaseApplicationError):
    """Authenticated but not allowed"""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "PERMISSION_DENIED")


class ValidationError(BaseApplicationError):
    """Invalid input"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class BusinessLogicError(BaseApplicationError):
    """Base class for business rule violations"""
    pass


class OrderNotFoundError(BusinessLogicError):
    def __init__(self, message: str = "Order not found"):
        super().__init__(message, "ORDER_NOT_FOUND")


class FoodNotFoundError(BusinessLogicError):
    def __init__(self, food_id: Any = None):
        message = f"Food item {food_id} not found" if food_id is not None else "Food item not found"
        super().__init__(message, "FOOD_NOT_FOUND", {"food_id": food_id} if food_id is not None else None)


class ShopNotFoundError(BusinessLogicError):
    def __init__(self, message: str = "Shop not found"):
        super().__init__(message, "SHOP_NOT_FOUND")


class CartItemNotFoundError(BusinessLogicError):
    def __init__(self):
        super().__init__("Cart item not found", "CART_ITEM_NOT_FOUND")


class ReviewNotFoundError(BusinessLogicError):
    def __init__(self):
        super().__init__("Review not found", "REVIEW_NOT_FOUND")


class DuplicateOrderError(BusinessLogicError):
    """A similar order was placed within the duplicate window"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "DUPLICATE_ORDER", details)


class InvalidStatusError(BusinessLogicError):
    def __init__(self, status: str):
        super().__init__(f"Invalid status value: {status}", "INVALID_STATUS", {"status": status})


class StatusVerificationError(BusinessLogicError):
    """Status write could not be read back"""

    def __init__(self, expected: str, actual: Optional[str]):
        super().__init__(
            "Update verification failed - status was not updated correctly",
            "STATUS_VERIFICATION_FAILED",
            {"expected": expected, "actual": actual},
        )


class InvalidSignatureError(BusinessLogicError):
    def __init__(self):
        super().__init__("Invalid payment signature", "INVALID_SIGNATURE")


class PaymentAlreadyProcessedError(BusinessLogicError):
    def __init__(self, order_id: int, order_identifier: Optional[str]):
        super().__init__(
            "Payment already processed",
            "PAYMENT_ALREADY_PROCESSED",
            {"order_id": order_id, "order_identifier": order_identifier},
        )


class PaymentGatewayError(BaseApplicationError):
    """Payment provider call failed"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "PAYMENT_GATEWAY_ERROR", details)


class InvalidCredentialsError(BusinessLogicError):
    def __init__(self):
        super().__init__("Invalid username or password", "INVALID_CREDENTIALS")


class AccountInactiveError(BusinessLogicError):
    def __init__(self):
        super().__init__("Admin account is inactive. Please contact administrator.", "ACCOUNT_INACTIVE")


class CredentialsExistError(BusinessLogicError):
    def __init__(self, shop_name: str):
        super().__init__(
            "Admin credentials already exist for this shop",
            "CREDENTIALS_EXIST",
            {"shop_name": shop_name},
        )


class EndpointGoneError(BaseApplicationError):
    def __init__(self, message: str):
        super().__init__(message, "ENDPOINT_GONE")


class NotificationError(BaseApplicationError):
    """Shop owner alert could not be delivered"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "NOTIFICATION_FAILED", details)
