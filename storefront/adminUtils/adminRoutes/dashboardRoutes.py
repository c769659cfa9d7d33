from fastapi import APIRouter, Depends

from storefront.models.userModel import User
from storefront.schemas.adminSchema import DashboardStats
from storefront.crud.adminService import AdminService
from storefront.dependencies.authDependencies import require_admin

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(admin: User = Depends(require_admin)):
    """
    Order and inventory figures for the admin dashboard

    - **totalRevenue**: sum of totals over orders whose payment completed
    - **ordersByStatus**: count per order status, zero included
    """
    return await AdminService.get_dashboard_stats()
