from fastapi import APIRouter, Depends, HTTPException, Query, status
from beanie import PydanticObjectId
from typing import List, Optional

from storefront.commonUtils.enumUtils import OrderStatus
from storefront.models.userModel import User
from storefront.schemas.orderSchema import OrderCreate, OrderRead, OrderPayRequest, OrderStatusUpdate
from storefront.crud.userService import current_active_user
from storefront.crud.orderService import OrderService
from storefront.dependencies.authDependencies import require_admin

import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/orders",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    tags=["orders"]
)
async def create_order(
        order_data: OrderCreate,
        current_user: User = Depends(current_active_user)
):
    """
    Place an order from the current cart.

    Stock is taken for every line and the cart is emptied; if any line cannot
    be served nothing changes.
    """
    try:
        return await OrderService.create_order(current_user.id, order_data)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating order for user {current_user.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating order: {str(e)}"
        )


@router.get("/orders/myorders", response_model=List[OrderRead], tags=["orders"])
async def get_my_orders(
        limit: int = Query(50, ge=1, le=100),
        skip: int = Query(0, ge=0),
        current_user: User = Depends(current_active_user)
):
    """Get all orders for the current user"""
    return await OrderService.get_user_orders(user_id=current_user.id, limit=limit, skip=skip)


@router.get("/orders", response_model=List[OrderRead], tags=["orders", "admin"])
async def get_all_orders(
        status_filter: Optional[OrderStatus] = Query(None, alias="status"),
        limit: int = Query(100, ge=1, le=100),
        skip: int = Query(0, ge=0),
        admin: User = Depends(require_admin)
):
    """Get all orders (admin only)"""
    return await OrderService.list_all_orders(status_filter=status_filter, limit=limit, skip=skip)


@router.get("/orders/{order_id}", response_model=OrderRead, tags=["orders"])
async def get_order(
        order_id: PydanticObjectId,
        current_user: User = Depends(current_active_user)
):
    """Get a specific order; owners and admins only"""
    return await OrderService.get_order_for_user(order_id, current_user)


@router.put("/orders/{order_id}/pay", response_model=OrderRead, tags=["orders"])
async def mark_order_paid(
        order_id: PydanticObjectId,
        payment: OrderPayRequest,
        current_user: User = Depends(current_active_user)
):
    """Mark an order as paid"""
    return await OrderService.mark_order_paid(order_id, current_user.id, payment.transaction_id)


@router.put("/orders/{order_id}/status", response_model=OrderRead, tags=["orders", "admin"])
async def update_order_status(
        order_id: PydanticObjectId,
        update: OrderStatusUpdate,
        admin: User = Depends(require_admin)
):
    """Move an order along pending → processing → shipped → delivered, or cancel it (admin only)"""
    return await OrderService.update_order_status(order_id, update)
