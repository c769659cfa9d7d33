from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict
from pymongo import IndexModel, ASCENDING

from storefront.commonUtils.enumUtils import ProductCategory
from storefront.config.settings import settings


class Review(BaseModel):
    """Customer review embedded in a product"""
    user_id: PydanticObjectId
    name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Specification(BaseModel):
    name: str
    value: str


class Dimensions(BaseModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class Product(Document):
    """Product document in MongoDB"""
    id: Optional[PydanticObjectId] = Field(None, alias="_id")

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    original_price: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0, le=100)  # percent
    category: ProductCategory = ProductCategory.OTHER
    subcategory: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)

    images: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    specifications: List[Specification] = Field(default_factory=list)
    weight: float = Field(default=0, ge=0)
    dimensions: Optional[Dimensions] = None

    stock: int = Field(..., ge=0)  # decremented at checkout, never reserved by the cart
    low_stock_threshold: int = Field(default_factory=lambda: settings.LOW_STOCK_THRESHOLD, ge=0)
    sold_count: int = Field(default=0, ge=0)

    is_active: bool = True
    is_featured: bool = False

    reviews: List[Review] = Field(default_factory=list)
    rating: float = 0
    num_reviews: int = 0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        indexes = [
            IndexModel([("sku", ASCENDING)], unique=True),
            [("category", 1), ("subcategory", 1)],
            [("price", 1)],
            [("rating", -1)],
            [("created_at", -1)],
        ]

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        validate_assignment=True,  # nested updates arrive as plain dicts
    )

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= self.low_stock_threshold

    def calculate_average_rating(self) -> None:
        if not self.reviews:
            self.rating = 0
            self.num_reviews = 0
        else:
            self.rating = round(sum(review.rating for review in self.reviews) / len(self.reviews), 2)
            self.num_reviews = len(self.reviews)
