from typing import Dict, Any
from beanie import PydanticObjectId
from fastapi import HTTPException, status

from storefront.crud.orderService import OrderService
from storefront.crud.paymentGateway import PaymentGateway
from storefront.schemas.paymentSchema import PaymentProcessRequest

import logging

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for the mock payment step"""

    @staticmethod
    async def process_payment(
            user_id: PydanticObjectId,
            request: PaymentProcessRequest,
            gateway: PaymentGateway
    ) -> Dict[str, Any]:
        """
        Charge an order through the gateway and record the outcome.

        Only the already-paid guard protects against double charging; two
        concurrent calls for the same unpaid order both reach the gateway.
        """
        order = await OrderService.get_owned_order(request.order_id, user_id)

        if order.is_paid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order is already paid"
            )

        result = await gateway.charge(order, request.payment_method, request.payment_details)

        if not result.success:
            order.mark_payment_failed()
            await order.save()
            logger.warning(f"⚠️ Payment failed for order {order.order_number} ({result.transaction_id})")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment processing failed. Please try again."
            )

        order.record_payment_completed(request.payment_method, result.transaction_id)
        await order.save()
        logger.info(f"✅ Payment {result.transaction_id} completed for order {order.order_number}")

        return {
            "message": "Payment processed successfully",
            "transaction_id": result.transaction_id,
            "order": order,
        }

    @staticmethod
    async def get_payment_status(user_id: PydanticObjectId, order_id: PydanticObjectId) -> Dict[str, Any]:
        order = await OrderService.get_owned_order(order_id, user_id)
        return {
            "payment_status": order.payment_info.status,
            "transaction_id": order.payment_info.transaction_id,
            "paid_at": order.payment_info.paid_at,
        }
