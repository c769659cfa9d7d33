from datetime import datetime
from typing import Optional, List
from beanie import PydanticObjectId
from pydantic import Field

from storefront.commonUtils.enumUtils import ProductCategory
from storefront.config.settings import settings
from storefront.schemas.baseSchema import CamelModel


# ============= PRODUCT SCHEMAS =============
class SpecificationSchema(CamelModel):
    name: str
    value: str


class DimensionsSchema(CamelModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class ProductCreate(CamelModel):
    """Schema for creating a product (admin)"""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    original_price: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    category: ProductCategory = ProductCategory.OTHER
    subcategory: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    specifications: List[SpecificationSchema] = Field(default_factory=list)
    weight: float = Field(default=0, ge=0)
    dimensions: Optional[DimensionsSchema] = None
    stock: int = Field(..., ge=0, alias="countInStock")
    low_stock_threshold: int = Field(default_factory=lambda: settings.LOW_STOCK_THRESHOLD, ge=0)
    is_featured: bool = False


class ProductUpdate(CamelModel):
    """Schema for updating a product (admin); only the fields sent are changed"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100)
    category: Optional[ProductCategory] = None
    subcategory: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1)
    images: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    specifications: Optional[List[SpecificationSchema]] = None
    weight: Optional[float] = Field(None, ge=0)
    dimensions: Optional[DimensionsSchema] = None
    stock: Optional[int] = Field(None, ge=0, alias="countInStock")
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)


class ReviewRead(CamelModel):
    user_id: PydanticObjectId = Field(..., alias="user")
    name: str
    rating: int
    comment: str
    created_at: datetime


class ProductRead(CamelModel):
    """Schema for reading a product"""
    id: PydanticObjectId = Field(..., alias="_id")
    name: str
    description: str
    price: float
    original_price: float
    discount: float
    category: ProductCategory
    subcategory: str
    brand: str
    sku: str
    images: List[str]
    colors: List[str]
    sizes: List[str]
    tags: List[str]
    specifications: List[SpecificationSchema]
    weight: float
    dimensions: Optional[DimensionsSchema] = None
    stock: int = Field(..., alias="countInStock")
    low_stock_threshold: int
    sold_count: int
    is_active: bool
    is_featured: bool
    reviews: List[ReviewRead]
    rating: float
    num_reviews: int
    created_at: datetime
    updated_at: datetime


class ProductSummary(CamelModel):
    """Product fields shown next to a cart line"""
    id: PydanticObjectId = Field(..., alias="_id")
    name: str
    price: float
    images: List[str]
    stock: int = Field(..., alias="countInStock")
    is_active: bool
