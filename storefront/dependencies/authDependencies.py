from fastapi import Depends, HTTPException, status

from storefront.crud.userService import current_active_user
from storefront.models.userModel import User


# Ensure only superusers/admins can access
def require_admin(user: User = Depends(current_active_user)):
    if not user.is_superuser:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return user
