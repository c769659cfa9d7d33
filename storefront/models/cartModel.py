from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId, before_event, Insert, Replace, Save
from pydantic import BaseModel, Field, ConfigDict
from pymongo import IndexModel, ASCENDING


class CartItem(BaseModel):
    """Individual line in a cart, identified by (product, color, size)"""
    id: PydanticObjectId = Field(default_factory=PydanticObjectId, alias="_id")
    product_id: PydanticObjectId
    quantity: int = Field(..., gt=0)
    selected_color: str = ""
    selected_size: str = ""
    price: float = Field(..., ge=0)  # unit price captured when the line was added
    added_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def matches(self, product_id: PydanticObjectId, selected_color: str, selected_size: str) -> bool:
        return (
            self.product_id == product_id
            and self.selected_color == selected_color
            and self.selected_size == selected_size
        )


class Cart(Document):
    """Shopping cart for a user"""
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    user_id: PydanticObjectId  # Reference to User
    items: List[CartItem] = Field(default_factory=list)
    total_items: int = 0
    total_price: float = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        indexes = [
            IndexModel([("user_id", ASCENDING)], unique=True),  # one cart per user
        ]

    model_config = ConfigDict(populate_by_name=True)

    def recalculate_totals(self) -> None:
        self.total_items = sum(item.quantity for item in self.items)
        self.total_price = round(sum(item.subtotal for item in self.items), 2)

    @before_event(Insert, Replace, Save)
    def refresh_totals(self):
        self.recalculate_totals()
        self.updated_at = datetime.utcnow()

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, item_id: PydanticObjectId) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def add_item(
            self,
            product_id: PydanticObjectId,
            quantity: int,
            selected_color: str,
            selected_size: str,
            price: float
    ) -> CartItem:
        """Merge into the matching variant line, or append a new one"""
        existing_item = next(
            (item for item in self.items if item.matches(product_id, selected_color, selected_size)),
            None
        )

        if existing_item:
            existing_item.quantity += quantity
            line = existing_item
        else:
            line = CartItem(
                product_id=product_id,
                quantity=quantity,
                selected_color=selected_color,
                selected_size=selected_size,
                price=price,
            )
            self.items.append(line)

        self.recalculate_totals()
        return line

    def update_item_quantity(self, item_id: PydanticObjectId, quantity: int) -> bool:
        item = self.get_item(item_id)
        if not item:
            return False
        item.quantity = quantity
        self.recalculate_totals()
        return True

    def remove_item(self, item_id: PydanticObjectId) -> bool:
        remaining = [item for item in self.items if item.id != item_id]
        removed = len(remaining) != len(self.items)
        self.items = remaining
        self.recalculate_totals()
        return removed

    def clear(self) -> None:
        self.items = []
        self.recalculate_totals()
