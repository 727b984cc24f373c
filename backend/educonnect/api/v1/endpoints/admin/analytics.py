"""
Admin analytics endpoint.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_admin
from educonnect.services.admin_service import AdminService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("")
async def get_analytics(
    days: int = Query(30, ge=1, le=365),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Platform-wide counts, growth over the last `days` and enrollment breakdown"""
    return success_response(await AdminService(db).analytics(days))
