from typing import Dict, Any

from storefront.commonUtils.enumUtils import OrderStatus, PaymentStatus
from storefront.models.orderModel import Order
from storefront.models.productModel import Product


class AdminService:
    """Aggregates for the admin dashboard"""

    @staticmethod
    async def get_dashboard_stats() -> Dict[str, Any]:
        total_orders = await Order.find_all().count()

        paid_orders = await Order.find({"payment_info.status": PaymentStatus.COMPLETED.value}).to_list()
        total_revenue = round(sum(order.total_price for order in paid_orders), 2)

        orders_by_status = {}
        for order_status in OrderStatus:
            orders_by_status[order_status.value] = await Order.find(
                {"order_status": order_status.value}
            ).count()

        products = await Product.find({"is_active": True}).to_list()
        out_of_stock = sum(1 for p in products if p.stock == 0)
        low_stock = sum(1 for p in products if p.is_low_stock)

        return {
            "total_orders": total_orders,
            "total_revenue": total_revenue,
            "paid_orders": len(paid_orders),
            "orders_by_status": orders_by_status,
            "total_products": len(products),
            "inventory": {
                "total": len(products),
                "in_stock": len(products) - out_of_stock - low_stock,
                "low_stock": low_stock,
                "out_of_stock": out_of_stock,
            },
        }
