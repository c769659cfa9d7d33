from fastapi import APIRouter, Depends, Query, status
from beanie import PydanticObjectId
from typing import List, Optional

from storefront.commonUtils.enumUtils import ProductCategory, ProductSort
from storefront.models.userModel import User
from storefront.schemas.productSchema import ProductCreate, ProductUpdate, ProductRead, ReviewCreate
from storefront.crud.userService import current_active_user, current_optional_user
from storefront.crud.productService import ProductService
from storefront.dependencies.authDependencies import require_admin

router = APIRouter()


# ============= PRODUCTS ROUTES =============
@router.get("/products", response_model=List[ProductRead], tags=["products"])
async def list_products(
        category: Optional[ProductCategory] = None,
        brand: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
        max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
        featured: Optional[bool] = None,
        sort: ProductSort = ProductSort.NEWEST,
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100)
):
    """Get active products with optional filtering"""
    return await ProductService.list_products(
        category=category,
        brand=brand,
        search=search,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        sort=sort,
        skip=skip,
        limit=limit
    )


@router.get("/products/{product_id}", response_model=ProductRead, tags=["products"])
async def get_product(
        product_id: PydanticObjectId,
        current_user: Optional[User] = Depends(current_optional_user)
):
    """Get a specific product; admins also see deactivated ones"""
    include_inactive = bool(current_user and current_user.is_superuser)
    return await ProductService.get_product(product_id, include_inactive=include_inactive)


@router.post(
    "/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    tags=["products", "admin"]
)
async def create_product(
        product_data: ProductCreate,
        admin: User = Depends(require_admin)
):
    """Create a new product (admin only)"""
    return await ProductService.create_product(product_data)


@router.put("/products/{product_id}", response_model=ProductRead, tags=["products", "admin"])
async def update_product(
        product_id: PydanticObjectId,
        product_data: ProductUpdate,
        admin: User = Depends(require_admin)
):
    """Update a product (admin only)"""
    return await ProductService.update_product(product_id, product_data)


@router.delete("/products/{product_id}", response_model=ProductRead, tags=["products", "admin"])
async def delete_product(
        product_id: PydanticObjectId,
        admin: User = Depends(require_admin)
):
    """Take a product out of the catalog (admin only)"""
    return await ProductService.delete_product(product_id)


@router.post(
    "/products/{product_id}/reviews",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    tags=["products"]
)
async def add_review(
        product_id: PydanticObjectId,
        review: ReviewCreate,
        current_user: User = Depends(current_active_user)
):
    """Review a product (once per user)"""
    return await ProductService.add_review(product_id, current_user, review)
