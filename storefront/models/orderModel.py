from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict
from pymongo import IndexModel, ASCENDING

from storefront.commonUtils.enumUtils import (
    OrderStatus,
    PaymentStatus,
    PaymentMethod,
    ORDER_STATUS_TRANSITIONS,
    PAYMENT_COMPLETED_EVENT,
)
from storefront.commonUtils.idUtils import generate_order_number


class OrderItem(BaseModel):
    """Snapshot of a cart line at checkout; later product edits do not touch it"""
    product_id: PydanticObjectId
    name: str
    image: str = ""
    price: float = Field(..., ge=0)
    quantity: int = Field(..., gt=0)
    selected_color: str = ""
    selected_size: str = ""

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class ShippingAddress(BaseModel):
    full_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class PaymentInfo(BaseModel):
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str = ""
    paid_at: Optional[datetime] = None


class StatusHistoryEntry(BaseModel):
    # Order statuses plus payment events such as "payment_completed"
    status: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    note: str = ""


class Order(Document):
    """
    Order placed from a user's cart.

    Items, shipping address and prices are fixed at checkout. Afterwards the
    document only changes through status transitions and payment updates,
    both of which append to ``status_history``.
    """
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    user_id: PydanticObjectId
    order_number: str = Field(default_factory=generate_order_number)

    order_items: List[OrderItem]
    shipping_address: ShippingAddress
    payment_info: PaymentInfo

    # Price breakdown as submitted at checkout
    items_price: float = Field(default=0, ge=0)
    tax_price: float = Field(default=0, ge=0)
    shipping_price: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)
    total_price: float = Field(default=0, ge=0)
    coupon_code: str = ""
    order_notes: str = ""

    order_status: OrderStatus = Field(default=OrderStatus.PENDING)
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    tracking_number: str = ""
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            IndexModel([("order_number", ASCENDING)], unique=True),
            [("order_status", 1)],
            [("payment_info.status", 1)],
        ]

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )

    @property
    def is_paid(self) -> bool:
        return self.payment_info.status == PaymentStatus.COMPLETED

    def add_history(self, status: str, note: str = "") -> None:
        self.status_history.append(StatusHistoryEntry(status=status, note=note))
        self.updated_at = datetime.utcnow()

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return OrderStatus(new_status) in ORDER_STATUS_TRANSITIONS[OrderStatus(self.order_status)]

    def update_status(self, new_status: OrderStatus, note: str = "") -> None:
        current = OrderStatus(self.order_status)
        new_status = OrderStatus(new_status)
        if not self.can_transition_to(new_status):
            raise ValueError(f"Cannot change order status from {current.value} to {new_status.value}")

        self.order_status = new_status
        self.add_history(new_status.value, note)

        if new_status == OrderStatus.DELIVERED:
            self.delivered_at = datetime.utcnow()

    def mark_paid(self, method: PaymentMethod, transaction_id: str = "") -> None:
        self.payment_info.status = PaymentStatus.COMPLETED
        self.payment_info.method = method
        self.payment_info.transaction_id = transaction_id
        self.payment_info.paid_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()

    def record_payment_completed(self, method: PaymentMethod, transaction_id: str) -> None:
        self.mark_paid(method, transaction_id)
        self.add_history(PAYMENT_COMPLETED_EVENT, f"Payment completed via {PaymentMethod(method).value}")

    def mark_payment_failed(self) -> None:
        self.payment_info.status = PaymentStatus.FAILED
        self.updated_at = datetime.utcnow()
