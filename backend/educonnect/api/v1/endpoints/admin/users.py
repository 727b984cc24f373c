"""
Admin user management endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User, UserRole
from educonnect.modules.auth.dependencies import get_current_admin
from educonnect.schemas.admin import AdminUserUpdate
from educonnect.schemas.auth import UserWithProfileResponse
from educonnect.services.admin_service import AdminService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_users(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """List users, searched by name or email and filtered by role"""
    data, total, params = await AdminService(db).list_users(page, limit, search, role)
    return paginated_response(data, total, params.page, params.limit)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await AdminService(db).get_user(user_id)
    return success_response(UserWithProfileResponse.model_validate(user).model_dump())


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    user_data: AdminUserUpdate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update name, email, role or active flag; deactivation revokes the user's sessions"""
    user = await AdminService(db).update_user(current_admin, user_id, user_data)
    return success_response(UserWithProfileResponse.model_validate(user).model_dump(), "User updated")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await AdminService(db).delete_user(current_admin, user_id)
    return success_response(message="User deleted")
