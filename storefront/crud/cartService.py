from typing import Iterable, Dict, Any
from beanie import PydanticObjectId
from fastapi import HTTPException, status

from storefront.config.settings import settings
from storefront.models.productModel import Product
from storefront.models.cartModel import Cart

import logging

logger = logging.getLogger(__name__)


class CartService:
    """Service layer for cart operations"""

    @staticmethod
    async def get_or_create_cart(user_id: PydanticObjectId) -> Cart:
        """Get existing cart or create new one"""
        cart = await Cart.find_one(Cart.user_id == user_id)

        if not cart:
            cart = Cart(user_id=user_id, items=[])
            await cart.insert()

        return cart

    @staticmethod
    async def add_item(
            user_id: PydanticObjectId,
            product_id: PydanticObjectId,
            quantity: int,
            selected_color: str = "",
            selected_size: str = ""
    ) -> Cart:
        """Add item to cart or increase quantity if the same variant is already there"""
        product = await Product.get(product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )

        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is not available for purchase"
            )

        if product.stock < quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Not enough stock"
            )

        cart = await CartService.get_or_create_cart(user_id)
        cart.add_item(product.id, quantity, selected_color, selected_size, product.price)
        await cart.save()
        logger.debug(f"Added {quantity} x {product.id} to cart of user {user_id}")
        return cart

    @staticmethod
    async def update_item_quantity(
            user_id: PydanticObjectId,
            item_id: PydanticObjectId,
            quantity: int
    ) -> Cart:
        """Set the quantity of a cart line"""
        cart = await CartService.get_or_create_cart(user_id)

        if not cart.update_item_quantity(item_id, quantity):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart"
            )

        await cart.save()
        return cart

    @staticmethod
    async def remove_item(user_id: PydanticObjectId, item_id: PydanticObjectId) -> Cart:
        """Remove a cart line entirely"""
        cart = await CartService.get_or_create_cart(user_id)

        if not cart.remove_item(item_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart"
            )

        await cart.save()
        return cart

    @staticmethod
    async def clear_cart(user_id: PydanticObjectId) -> Cart:
        """Clear all items from cart"""
        cart = await CartService.get_or_create_cart(user_id)
        cart.clear()
        await cart.save()
        return cart

    @staticmethod
    async def get_cart_with_products(user_id: PydanticObjectId) -> dict:
        """Get cart with product details for every line"""
        cart = await CartService.get_or_create_cart(user_id)

        product_ids = list({item.product_id for item in cart.items})
        products = await Product.find({"_id": {"$in": product_ids}}).to_list()
        products_map = {p.id: p for p in products}

        items_with_products = []
        for item in cart.items:
            items_with_products.append({
                "_id": item.id,
                "product_id": item.product_id,
                "quantity": item.quantity,
                "selected_color": item.selected_color,
                "selected_size": item.selected_size,
                "price": item.price,
                "subtotal": round(item.subtotal, 2),
                "added_at": item.added_at,
                "product": products_map.get(item.product_id),
            })

        return {
            "_id": cart.id,
            "user_id": cart.user_id,
            "items": items_with_products,
            "total_items": cart.total_items,
            "total_price": cart.total_price,
            "created_at": cart.created_at,
            "updated_at": cart.updated_at
        }

    @staticmethod
    def calculate_quote(items_price: float) -> Dict[str, float]:
        """Tax, shipping and total for a given items price"""
        items_price = round(items_price, 2)
        tax_price = round(items_price * settings.TAX_RATE, 2)
        if items_price == 0 or items_price > settings.FREE_SHIPPING_THRESHOLD:
            shipping_price = 0.0
        else:
            shipping_price = settings.FLAT_SHIPPING_PRICE
        total_price = round(items_price + tax_price + shipping_price, 2)

        return {
            "items_price": items_price,
            "tax_price": tax_price,
            "shipping_price": shipping_price,
            "total_price": total_price,
        }

    @staticmethod
    def quote_lines(lines: Iterable[Any]) -> Dict[str, float]:
        """Quote for anything carrying ``price`` and ``quantity``"""
        return CartService.calculate_quote(sum(line.price * line.quantity for line in lines))

    @staticmethod
    async def get_cart_quote(user_id: PydanticObjectId) -> Dict[str, Any]:
        cart = await CartService.get_or_create_cart(user_id)
        quote = CartService.quote_lines(cart.items)
        quote["total_items"] = cart.total_items
        return quote
