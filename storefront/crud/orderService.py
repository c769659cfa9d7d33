from datetime import datetime
from typing import List, Optional, Tuple
from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Inc, Push, Set
from fastapi import HTTPException, status

from storefront.commonUtils.enumUtils import OrderStatus
from storefront.crud.cartService import CartService
from storefront.models.cartModel import Cart
from storefront.models.orderModel import Order, OrderItem, ShippingAddress, PaymentInfo
from storefront.models.productModel import Product
from storefront.schemas.orderSchema import OrderCreate, OrderStatusUpdate

import logging

logger = logging.getLogger(__name__)

# (product_id, quantity) pairs already taken out of stock
Reservation = List[Tuple[PydanticObjectId, int]]


class OrderService:
    """Service layer for checkout and the order lifecycle"""

    # ------------------------------------------------------------------ #
    #                               Checkout                              #
    # ------------------------------------------------------------------ #
    @staticmethod
    async def create_order(user_id: PydanticObjectId, order_data: OrderCreate) -> Order:
        """
        Turn the user's cart into an order.

        1. Claim the cart lines (the cart is emptied in the same write).
        2. Snapshot every claimed line into an order item.
        3. Take the ordered quantities out of stock (conditional, per product).
        4. Persist the order.

        If any step after the claim fails, the stock taken so far is put back
        and the lines are returned to the cart.
        """
        cart = await OrderService.claim_cart(user_id)
        if cart is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty"
            )

        try:
            order = await OrderService.place_claimed_cart(user_id, cart, order_data)
        except Exception:
            await OrderService.restore_cart(user_id, cart)
            raise

        logger.info(
            f"✅ Order {order.order_number} created for user {user_id}: "
            f"{len(order.order_items)} line(s), total {order.total_price}"
        )
        return order

    @staticmethod
    async def claim_cart(user_id: PydanticObjectId) -> Optional[Cart]:
        """Empty a non-empty cart in one write and return it as it was, or None"""
        return await Cart.find_one(
            Cart.user_id == user_id,
            {"items": {"$ne": []}},
        ).update(
            Set({
                Cart.items: [],
                Cart.total_items: 0,
                Cart.total_price: 0,
                Cart.updated_at: datetime.utcnow(),
            }),
            response_type=UpdateResponse.OLD_DOCUMENT,
        )

    @staticmethod
    async def restore_cart(user_id: PydanticObjectId, claimed: Cart) -> None:
        """Give claimed lines back to the cart, next to anything added since"""
        await Cart.find_one(Cart.user_id == user_id).update(
            Push({Cart.items: {"$each": claimed.items}}),
            Inc({Cart.total_items: claimed.total_items, Cart.total_price: claimed.total_price}),
            Set({Cart.updated_at: datetime.utcnow()}),
        )
        logger.warning(f"⚠️ Checkout for user {user_id} failed, {len(claimed.items)} line(s) returned to cart")

    @staticmethod
    async def place_claimed_cart(user_id: PydanticObjectId, cart: Cart, order_data: OrderCreate) -> Order:
        product_ids = list({item.product_id for item in cart.items})
        products = await Product.find({"_id": {"$in": product_ids}}).to_list()
        products_map = {p.id: p for p in products}

        # Snapshot cart lines
        order_items = []
        for item in cart.items:
            product = products_map.get(item.product_id)
            if not product:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Product no longer available"
                )
            if not product.is_active:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Product is not available for purchase"
                )

            order_items.append(OrderItem(
                product_id=product.id,
                name=product.name,
                image=product.primary_image,
                price=item.price,
                quantity=item.quantity,
                selected_color=item.selected_color,
                selected_size=item.selected_size,
            ))

        # Client figures are stored as given; only omitted ones are computed here
        quote = CartService.quote_lines(order_items)
        prices = {
            field: getattr(order_data, field) if getattr(order_data, field) is not None else quote[field]
            for field in ("items_price", "tax_price", "shipping_price", "total_price")
        }
        if order_data.total_price is None:
            prices["total_price"] = max(round(
                prices["items_price"] + prices["tax_price"] + prices["shipping_price"] - order_data.discount, 2
            ), 0)

        order = Order(
            user_id=user_id,
            order_items=order_items,
            shipping_address=ShippingAddress(**order_data.shipping_address.model_dump()),
            payment_info=PaymentInfo(method=order_data.payment_method),
            discount=order_data.discount,
            coupon_code=order_data.coupon_code,
            order_notes=order_data.order_notes,
            **prices,
        )
        order.add_history(OrderStatus.PENDING.value, "Order placed")

        reserved = await OrderService.reserve_stock(order_items, products_map)

        try:
            await order.insert()
        except Exception:
            logger.error(f"Failed to save order for user {user_id}, releasing reserved stock", exc_info=True)
            await OrderService.release_stock(reserved)
            raise

        return order


    @staticmethod
    async def reserve_stock(order_items: List[OrderItem], products_map: dict) -> Reservation:
        """
        Decrement stock and bump sold count for every order item.

        Each update only matches while enough stock is left, so concurrent
        checkouts cannot push stock below zero. On the first line that cannot
        be served, everything reserved so far is released and a 400 is raised.
        """
        reserved: Reservation = []

        for item in order_items:
            result = await Product.find_one(
                Product.id == item.product_id,
                Product.stock >= item.quantity,
            ).update(Inc({Product.stock: -item.quantity, Product.sold_count: item.quantity}))

            if not result or result.modified_count == 0:
                product = products_map.get(item.product_id)
                name = product.name if product else str(item.product_id)
                logger.warning(
                    f"⚠️ Not enough stock for {name} ({item.product_id}), "
                    f"wanted {item.quantity}; releasing {len(reserved)} reservation(s)"
                )
                await OrderService.release_stock(reserved)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Not enough stock for {name}"
                )

            reserved.append((item.product_id, item.quantity))

        return reserved

    @staticmethod
    async def release_stock(reserved: Reservation) -> None:
        """Undo ``reserve_stock`` for the given lines"""
        for product_id, quantity in reversed(reserved):
            await Product.find_one(Product.id == product_id).update(
                Inc({Product.stock: quantity, Product.sold_count: -quantity})
            )
            logger.info(f"Released {quantity} unit(s) of {product_id} back to stock")

    # ------------------------------------------------------------------ #
    #                               Queries                               #
    # ------------------------------------------------------------------ #
    @staticmethod
    async def get_owned_order(order_id: PydanticObjectId, user_id: PydanticObjectId) -> Order:
        """Fetch an order the caller owns, 404 if missing and 403 otherwise"""
        order = await Order.get(order_id)

        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )

        if order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )

        return order

    @staticmethod
    async def get_order_for_user(order_id: PydanticObjectId, user) -> Order:
        """Owner or admin may view an order"""
        order = await Order.get(order_id)

        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )

        if order.user_id != user.id and not user.is_superuser:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied"
            )

        return order

    @staticmethod
    async def get_user_orders(
            user_id: PydanticObjectId,
            limit: int = 50,
            skip: int = 0
    ) -> List[Order]:
        """Get all orders for a user, newest first"""
        orders = await Order.find(
            Order.user_id == user_id
        ).sort(-Order.created_at).skip(skip).limit(limit).to_list()
        return orders

    @staticmethod
    async def list_all_orders(
            status_filter: Optional[OrderStatus] = None,
            limit: int = 100,
            skip: int = 0
    ) -> List[Order]:
        """Get every order (admin), newest first"""
        query = {}
        if status_filter:
            query["order_status"] = OrderStatus(status_filter).value

        orders = await Order.find(query).sort(-Order.created_at).skip(skip).limit(limit).to_list()
        return orders

    # ------------------------------------------------------------------ #
    #                              Mutations                              #
    # ------------------------------------------------------------------ #
    @staticmethod
    async def mark_order_paid(
            order_id: PydanticObjectId,
            user_id: PydanticObjectId,
            transaction_id: str = ""
    ) -> Order:
        """Owner confirms payment made outside the mock gateway"""
        order = await OrderService.get_owned_order(order_id, user_id)
        order.mark_paid(order.payment_info.method, transaction_id)
        await order.save()
        logger.info(f"Order {order.order_number} marked as paid by user {user_id}")
        return order

    @staticmethod
    async def update_order_status(order_id: PydanticObjectId, update: OrderStatusUpdate) -> Order:
        """Admin moves an order along its status workflow"""
        order = await Order.get(order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )

        previous = order.order_status
        try:
            order.update_status(update.status, update.note)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )

        if update.tracking_number is not None:
            order.tracking_number = update.tracking_number

        await order.save()
        logger.info(
            f"Order {order.order_number} status {OrderStatus(previous).value} → {OrderStatus(order.order_status).value}"
        )
        return order
