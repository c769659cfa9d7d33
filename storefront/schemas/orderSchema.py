from datetime import datetime
from typing import Optional, List
from beanie import PydanticObjectId
from pydantic import Field, ConfigDict

from storefront.commonUtils.enumUtils import OrderStatus, PaymentMethod, PaymentStatus
from storefront.schemas.baseSchema import CamelModel


class ShippingAddressSchema(CamelModel):
    full_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class OrderCreate(CamelModel):
    """
    Checkout request.

    Price fields are taken as submitted by the client. Any field left out is
    filled from the server-side cart quote.
    """
    shipping_address: ShippingAddressSchema
    payment_method: PaymentMethod
    items_price: Optional[float] = Field(None, ge=0)
    tax_price: Optional[float] = Field(None, ge=0)
    shipping_price: Optional[float] = Field(None, ge=0)
    total_price: Optional[float] = Field(None, ge=0)
    discount: float = Field(default=0, ge=0)
    coupon_code: str = ""
    order_notes: str = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shippingAddress": {
                    "fullName": "Jane Doe",
                    "address": "1 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zipCode": "62701",
                    "country": "USA",
                    "phone": "+15551234567"
                },
                "paymentMethod": "credit_card",
                "itemsPrice": 20.0,
                "taxPrice": 2.0,
                "shippingPrice": 5.99,
                "totalPrice": 27.99
            }
        }
    )


class OrderPayRequest(CamelModel):
    transaction_id: str = ""


class OrderStatusUpdate(CamelModel):
    status: OrderStatus
    note: str = ""
    tracking_number: Optional[str] = None


class OrderItemRead(CamelModel):
    product_id: PydanticObjectId = Field(..., alias="product")
    name: str
    image: str
    price: float
    quantity: int
    selected_color: str
    selected_size: str
    subtotal: float


class PaymentInfoRead(CamelModel):
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: str
    paid_at: Optional[datetime] = None


class StatusHistoryRead(CamelModel):
    status: str
    timestamp: datetime
    note: str


class OrderRead(CamelModel):
    """Order response schema"""
    id: PydanticObjectId = Field(..., alias="_id")
    user_id: PydanticObjectId = Field(..., alias="user")
    order_number: str
    order_items: List[OrderItemRead]
    shipping_address: ShippingAddressSchema
    payment_info: PaymentInfoRead
    items_price: float
    tax_price: float
    shipping_price: float
    discount: float
    total_price: float
    coupon_code: str
    order_notes: str
    order_status: OrderStatus
    status_history: List[StatusHistoryRead]
    tracking_number: str
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
