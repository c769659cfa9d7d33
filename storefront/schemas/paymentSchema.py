from datetime import datetime
from typing import Optional, Dict, Any
from beanie import PydanticObjectId
from pydantic import Field

from storefront.commonUtils.enumUtils import PaymentMethod, PaymentStatus
from storefront.schemas.baseSchema import CamelModel
from storefront.schemas.orderSchema import OrderRead


class PaymentProcessRequest(CamelModel):
    order_id: PydanticObjectId
    payment_method: PaymentMethod
    # Opaque to the server; handed to the gateway untouched
    payment_details: Dict[str, Any] = Field(default_factory=dict)


class PaymentProcessResponse(CamelModel):
    message: str
    transaction_id: str
    order: OrderRead


class PaymentStatusResponse(CamelModel):
    payment_status: PaymentStatus
    transaction_id: str
    paid_at: Optional[datetime] = None
