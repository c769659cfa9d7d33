from datetime import datetime
from typing import Optional, List
from beanie import PydanticObjectId
from pydantic import Field

from storefront.schemas.baseSchema import CamelModel
from storefront.schemas.productSchema import ProductSummary


# ============= CART SCHEMAS =============
class CartAddItemRequest(CamelModel):
    """Request schema for adding to cart"""
    product_id: PydanticObjectId
    quantity: int = Field(default=1, gt=0)
    selected_color: str = ""
    selected_size: str = ""


class CartUpdateItemRequest(CamelModel):
    """Request schema for updating cart item"""
    quantity: int = Field(..., gt=0)


class CartItemRead(CamelModel):
    """Cart line with product details (for frontend)"""
    id: PydanticObjectId = Field(..., alias="_id")
    product_id: PydanticObjectId
    quantity: int
    selected_color: str
    selected_size: str
    price: float
    subtotal: float
    added_at: datetime
    product: Optional[ProductSummary] = None  # None once the product is gone


class CartRead(CamelModel):
    """Schema for reading cart"""
    id: PydanticObjectId = Field(..., alias="_id")
    user_id: PydanticObjectId
    items: List[CartItemRead]
    total_items: int
    total_price: float
    created_at: datetime
    updated_at: datetime


class CartQuote(CamelModel):
    """Server-side price breakdown for the current cart"""
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    total_items: int
