"""
Payment gateway abstraction.

The storefront never talks to a real processor. ``MockPaymentGateway`` stands
in for one and approves a configurable share of charges. Anything implementing
``PaymentGateway`` can be swapped in through the ``get_payment_gateway``
dependency, which is how tests force approvals and declines.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.commonUtils.enumUtils import PaymentMethod
from storefront.commonUtils.idUtils import generate_transaction_id
from storefront.config.settings import settings
from storefront.models.orderModel import Order

import logging

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    success: bool
    transaction_id: str
    message: str = ""


class PaymentGateway(ABC):
    """Charges an order's total through some payment processor"""

    @abstractmethod
    async def charge(
            self,
            order: Order,
            payment_method: PaymentMethod,
            payment_details: Dict[str, Any]
    ) -> PaymentResult:
        raise NotImplementedError


class MockPaymentGateway(PaymentGateway):
    """Approves a charge with probability ``success_rate``; never moves money"""

    def __init__(self, success_rate: Optional[float] = None, rng: Optional[random.Random] = None):
        if success_rate is None:
            success_rate = settings.PAYMENT_SUCCESS_RATE
        if not 0 <= success_rate <= 1:
            raise ValueError("success_rate must be between 0 and 1")
        self.success_rate = success_rate
        self._rng = rng or random.Random()

    async def charge(
            self,
            order: Order,
            payment_method: PaymentMethod,
            payment_details: Dict[str, Any]
    ) -> PaymentResult:
        transaction_id = generate_transaction_id(self._rng)
        success = self._rng.random() < self.success_rate

        logger.info(
            f"Mock charge of {order.total_price} for order {order.order_number} "
            f"via {PaymentMethod(payment_method).value}: {'approved' if success else 'declined'}"
        )

        if success:
            return PaymentResult(success=True, transaction_id=transaction_id, message="Payment approved")
        return PaymentResult(success=False, transaction_id=transaction_id, message="Payment declined")
