from fastapi import APIRouter, Depends
from typing import List
from beanie import PydanticObjectId

from storefront.models.userModel import User
from storefront.schemas.productSchema import ProductSummary
from storefront.schemas.adminSchema import StockUpdateRequest
from storefront.crud.productService import ProductService
from storefront.dependencies.authDependencies import require_admin

import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/low-stock", response_model=List[ProductSummary])
async def list_low_stock(admin: User = Depends(require_admin)):
    """Active products at or below their low-stock threshold, out-of-stock ones included"""
    return await ProductService.list_low_stock()


@router.patch("/{product_id}", response_model=ProductSummary)
async def update_stock(
        product_id: PydanticObjectId,
        update: StockUpdateRequest,
        admin: User = Depends(require_admin)
):
    """
    Set the stock count of a product

    - **product_id**: product to restock
    - **countInStock**: new absolute count, never negative
    """
    logger.info(f"Admin {admin.email} restocking product {product_id}")
    return await ProductService.set_stock(product_id, update.stock)
