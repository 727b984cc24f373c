"""
Admin class management endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_admin
from educonnect.schemas.admin import AdminClassCreate
from educonnect.services.admin_service import AdminService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_classes(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: Optional[str] = None,
    department: Optional[str] = None,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await AdminService(db).list_classes(page, limit, search, department)
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_class(
    class_data: AdminClassCreate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a class on behalf of a teacher profile"""
    service = AdminService(db)
    classroom = await service.create_class(current_admin, class_data)
    return success_response(await service.classes.serialize(classroom), "Class created successfully")
