from fastapi import APIRouter, Depends
from beanie import PydanticObjectId

from storefront.models.userModel import User
from storefront.schemas.cartSchema import (
    CartRead, CartAddItemRequest, CartUpdateItemRequest, CartQuote
)
from storefront.crud.userService import current_active_user
from storefront.crud.cartService import CartService

router = APIRouter()


# ============= CART ROUTES =============
@router.get("/cart", response_model=CartRead, tags=["cart"])
async def get_cart(current_user: User = Depends(current_active_user)):
    """Get current user's cart (created on first access)"""
    return await CartService.get_cart_with_products(current_user.id)


@router.get("/cart/quote", response_model=CartQuote, tags=["cart"])
async def get_cart_quote(current_user: User = Depends(current_active_user)):
    """Tax, shipping and total for the current cart"""
    return await CartService.get_cart_quote(current_user.id)


@router.post("/cart/items", response_model=CartRead, tags=["cart"])
async def add_to_cart(
        item: CartAddItemRequest,
        current_user: User = Depends(current_active_user)
):
    """Add item to cart"""
    await CartService.add_item(
        current_user.id,
        item.product_id,
        item.quantity,
        item.selected_color,
        item.selected_size
    )
    return await CartService.get_cart_with_products(current_user.id)


@router.put("/cart/items/{item_id}", response_model=CartRead, tags=["cart"])
async def update_cart_item(
        item_id: PydanticObjectId,
        update: CartUpdateItemRequest,
        current_user: User = Depends(current_active_user)
):
    """Update quantity of a cart line"""
    await CartService.update_item_quantity(current_user.id, item_id, update.quantity)
    return await CartService.get_cart_with_products(current_user.id)


@router.delete("/cart/items/{item_id}", response_model=CartRead, tags=["cart"])
async def remove_from_cart(
        item_id: PydanticObjectId,
        current_user: User = Depends(current_active_user)
):
    """Remove a cart line"""
    await CartService.remove_item(current_user.id, item_id)
    return await CartService.get_cart_with_products(current_user.id)


@router.delete("/cart", response_model=CartRead, tags=["cart"])
async def clear_cart(current_user: User = Depends(current_active_user)):
    """Clear entire cart"""
    await CartService.clear_cart(current_user.id)
    return await CartService.get_cart_with_products(current_user.id)
