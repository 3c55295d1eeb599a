"""
Business logic services.
Contains service layer implementations for core business operations.
"""

from .admin_service import AdminService, admin_service
from .cart_service import CartService, cart_service
from .catalog_service import CatalogService, catalog_service
from .lifecycle_service import LifecycleService, lifecycle_service
from .notification_service import NotificationService, SmsGateway, notification_service
from .order_service import OrderService, order_service
from .payment_service import PaymentService, RazorpayGateway, payment_service, razorpay_gateway
from .review_service import ReviewService, review_service

__all__ = [
    "AdminService",
    "CartService",
    "CatalogService",
    "LifecycleService",
    "NotificationService",
    "OrderService",
    "PaymentService",
    "RazorpayGateway",
    "ReviewService",
    "SmsGateway",
    "admin_service",
    "cart_service",
    "catalog_service",
    "lifecycle_service",
    "notification_service",
    "order_service",
    "payment_service",
    "razorpay_gateway",
    "review_service",
]
