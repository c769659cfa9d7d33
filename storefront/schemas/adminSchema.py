from typing import Dict
from pydantic import Field

from storefront.schemas.baseSchema import CamelModel


class InventoryStats(CamelModel):
    total: int
    in_stock: int
    low_stock: int
    out_of_stock: int


class DashboardStats(CamelModel):
    """Figures shown on the admin dashboard"""
    total_orders: int
    total_revenue: float  # orders whose payment completed
    paid_orders: int
    orders_by_status: Dict[str, int]
    total_products: int
    inventory: InventoryStats


class StockUpdateRequest(CamelModel):
    stock: int = Field(..., ge=0, alias="countInStock")
