"""
Order data models
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import BaseEntity, TimestampMixin, load_json


class OrderStatus(str, Enum):
    """Order status"""
    ORDERED = "ordered"
    ACCEPTED = "order accepted"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    PAID = "paid"           # set by payment verification, not by staff


# Statuses shop staff may set from the dashboard
ADMIN_STATUSES = [
    OrderStatus.ORDERED.value,
    OrderStatus.ACCEPTED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
]


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"


class PaymentState(str, Enum):
    """Gateway-side payment state kept in payment_details"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TransferStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderItem(BaseModel):
    """One priced line of an order"""
    food_id: int
    food_name: str
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0, description="unit price (paise)")
    shop_id: int
    shop_name: str


class PaymentSplit(BaseEntity):
    """Share of an order owed to one shop"""
    shop_id: int
    shop_name: Optional[str] = None
    owner_mobile: Optional[str] = None
    split_amount: int = Field(..., description="paise")
    transfer_id: str = ""
    transfer_status: TransferStatus = TransferStatus.PENDING
    transferred_at: Optional[datetime] = None


class PaymentDetails(BaseEntity):
    razorpay_order_id: str = ""
    razorpay_payment_id: str = ""
    razorpay_signature: str = ""
    transaction_id: str = ""
    payment_status: PaymentState = PaymentState.PENDING
    paid_at: Optional[datetime] = None
    splits: List[PaymentSplit] = Field(default_factory=list)


class Order(BaseEntity, TimestampMixin):
    """Active order (orders table)"""
    order_id: Optional[int] = None
    user_id: str
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    order_identifier: Optional[str] = None
    items: List[OrderItem]
    subtotal_paise: int
    tax_paise: int
    delivery_fee_paise: int
    total_paise: int
    payment_method: PaymentMethod
    order_status: bool = False
    status: OrderStatus = OrderStatus.ORDERED
    payment_status: bool = False
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)
    is_archived: bool = False
    archived_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @property
    def total_rupees(self) -> float:
        return self.total_paise / 100

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        data = dict(row)
        data["items"] = load_json(data.pop("items_json", None), [])
        data["payment_details"] = load_json(data.pop("payment_details_json", None), {}) or {}
        return cls.model_validate(data)

    def insert_params(self) -> List[Any]:
        return [
            self.user_id, self.user_email, self.user_phone, self.order_identifier,
            json.dumps([i.model_dump(mode="json") for i in self.items]),
            self.subtotal_paise, self.tax_paise, self.delivery_fee_paise, self.total_paise,
            self.payment_method, self.order_status, self.status, self.payment_status,
            self.payment_details.model_dump_json(), self.is_archived,
            self.expires_at, self.created_at, self.updated_at,
        ]


ORDER_INSERT_SQL = """
INSERT INTO orders(user_id, user_email, user_phone, order_identifier, items_json,
                   subtotal_paise, tax_paise, delivery_fee_paise, total_paise,
                   payment_method, order_status, status, payment_status,
                   payment_details_json, is_archived, expires_at, created_at, updated_at)
VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?) RETURNING order_id
"""


class OrderHistory(BaseEntity, TimestampMixin):
    """Permanent order record (order_history table)"""
    history_id: Optional[int] = None
    original_order_id: Optional[int] = None
    user_id: str
    user_email: Optional[str] = None
    order_identifier: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    total_paise: int
    payment_method: Optional[PaymentMethod] = None
    status: Optional[OrderStatus] = None
    order_status: bool = False
    payment_status: bool = False
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)
    lifecycle_notes: Optional[str] = None
    archived_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrderHistory":
        data = dict(row)
        data["items"] = load_json(data.pop("items_json", None), [])
        data["payment_details"] = load_json(data.pop("payment_details_json", None), {}) or {}
        return cls.model_validate(data)

    def insert_params(self) -> List[Any]:
        return [
            self.original_order_id, self.user_id, self.user_email, self.order_identifier,
            json.dumps([i.model_dump(mode="json") for i in self.items]),
            self.total_paise, self.payment_method, self.status,
            self.order_status, self.payment_status,
            self.payment_details.model_dump_json(), self.lifecycle_notes,
            self.archived_at, self.created_at, self.updated_at,
        ]


HISTORY_INSERT_SQL = """
INSERT INTO order_history(original_order_id, user_id, user_email, order_identifier, items_json,
                          total_paise, payment_method, status, order_status, payment_status,
                          payment_details_json, lifecycle_notes, archived_at, created_at, updated_at)
VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?,?) RETURNING history_id
"""
