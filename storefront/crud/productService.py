import re
from datetime import datetime
from typing import List, Optional
from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Push, Set
from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError

from storefront.commonUtils.enumUtils import ProductCategory, ProductSort
from storefront.models.productModel import Product, Review
from storefront.schemas.productSchema import ProductCreate, ProductUpdate, ReviewCreate

import logging

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    ProductSort.NEWEST: [("created_at", -1)],
    ProductSort.PRICE_ASC: [("price", 1)],
    ProductSort.PRICE_DESC: [("price", -1)],
    ProductSort.RATING: [("rating", -1), ("num_reviews", -1)],
    ProductSort.POPULAR: [("sold_count", -1)],
}


class ProductService:
    """Service layer for product operations"""

    @staticmethod
    async def create_product(product_data: ProductCreate) -> Product:
        """Create a new product (admin)"""
        product = Product(**product_data.model_dump())
        try:
            await product.insert()
        except DuplicateKeyError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A product with SKU {product_data.sku} already exists"
            )
        logger.info(f"Product {product.id} ({product.sku}) created")
        return product

    @staticmethod
    async def list_products(
            category: Optional[ProductCategory] = None,
            brand: Optional[str] = None,
            search: Optional[str] = None,
            min_price: Optional[float] = None,
            max_price: Optional[float] = None,
            featured: Optional[bool] = None,
            sort: ProductSort = ProductSort.NEWEST,
            skip: int = 0,
            limit: int = 20
    ) -> List[Product]:
        """Get active products with optional filtering"""
        query = {"is_active": True}

        if category:
            query["category"] = ProductCategory(category).value
        if brand:
            query["brand"] = brand
        if featured is not None:
            query["is_featured"] = featured

        price_range = {}
        if min_price is not None:
            price_range["$gte"] = min_price
        if max_price is not None:
            price_range["$lte"] = max_price
        if price_range:
            query["price"] = price_range

        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"description": pattern}, {"brand": pattern}]

        products = await (
            Product.find(query)
            .sort(*SORT_ORDERS[ProductSort(sort)])
            .skip(skip)
            .limit(limit)
            .to_list()
        )
        return products

    @staticmethod
    async def get_product(product_id: PydanticObjectId, include_inactive: bool = False) -> Product:
        product = await Product.get(product_id)

        if not product or (not product.is_active and not include_inactive):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )

        return product

    @staticmethod
    async def update_product(product_id: PydanticObjectId, product_data: ProductUpdate) -> Product:
        """Update the fields that were sent (admin)"""
        product = await ProductService.get_product(product_id, include_inactive=True)

        # Validated through the model; only the sent fields are written since
        # checkout moves the stock counters concurrently
        update_data = product_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(product, key, value)
        changes = {key: getattr(product, key) for key in update_data}
        changes["updated_at"] = datetime.utcnow()

        return await ProductService._set_fields(product_id, changes)

    @staticmethod
    async def delete_product(product_id: PydanticObjectId) -> Product:
        """Soft delete: the product disappears from the catalog, old orders keep their snapshot"""
        await ProductService.get_product(product_id, include_inactive=True)
        product = await ProductService._set_fields(
            product_id, {Product.is_active: False, Product.updated_at: datetime.utcnow()}
        )
        logger.info(f"Product {product.id} deactivated")
        return product

    @staticmethod
    async def add_review(product_id: PydanticObjectId, user, review_data: ReviewCreate) -> Product:
        """One review per user; keeps rating and review count in step"""
        product = await ProductService.get_product(product_id)

        if any(review.user_id == user.id for review in product.reviews):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product already reviewed"
            )

        review = Review(
            user_id=user.id,
            name=getattr(user, "full_name", None) or user.email,
            rating=review_data.rating,
            comment=review_data.comment,
        )
        product = await Product.find_one(
            Product.id == product_id,
            {"reviews.user_id": {"$ne": user.id}},
        ).update(
            Push({Product.reviews: review}),
            Set({Product.updated_at: datetime.utcnow()}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product already reviewed"
            )

        product.calculate_average_rating()
        await Product.find_one(Product.id == product_id).update(
            Set({Product.rating: product.rating, Product.num_reviews: product.num_reviews})
        )
        return product

    @staticmethod
    async def set_stock(product_id: PydanticObjectId, stock: int) -> Product:
        """Overwrite the stock count (admin inventory)"""
        previous = (await ProductService.get_product(product_id, include_inactive=True)).stock
        product = await ProductService._set_fields(
            product_id, {Product.stock: stock, Product.updated_at: datetime.utcnow()}
        )
        logger.info(f"Stock of {product.sku} set {previous} → {stock}")
        return product

    @staticmethod
    async def _set_fields(product_id: PydanticObjectId, changes: dict) -> Product:
        """$set the given fields and return the updated product"""
        product = await Product.find_one(Product.id == product_id).update(
            Set(changes),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found"
            )
        return product

    @staticmethod
    async def list_low_stock() -> List[Product]:
        """Active products at or below their low-stock threshold, emptiest first"""
        products = await Product.find({"is_active": True}).sort(("stock", 1)).to_list()
        return [p for p in products if p.stock <= p.low_stock_threshold]
