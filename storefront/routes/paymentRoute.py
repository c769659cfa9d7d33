from fastapi import APIRouter, Depends
from beanie import PydanticObjectId

from storefront.models.userModel import User
from storefront.schemas.paymentSchema import (
    PaymentProcessRequest,
    PaymentProcessResponse,
    PaymentStatusResponse,
)
from storefront.crud.userService import current_active_user
from storefront.crud.paymentGateway import PaymentGateway
from storefront.crud.paymentService import PaymentService
from storefront.dependencies.paymentDependencies import get_payment_gateway

router = APIRouter()


@router.post("/payment/process", response_model=PaymentProcessResponse, tags=["payment"])
async def process_payment(
        request: PaymentProcessRequest,
        current_user: User = Depends(current_active_user),
        gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """Charge an order through the (mock) payment gateway"""
    return await PaymentService.process_payment(current_user.id, request, gateway)


@router.get("/payment/status/{order_id}", response_model=PaymentStatusResponse, tags=["payment"])
async def get_payment_status(
        order_id: PydanticObjectId,
        current_user: User = Depends(current_active_user)
):
    """Payment status of an order the caller owns"""
    return await PaymentService.get_payment_status(current_user.id, order_id)
