"""
Profile API

- GET /profile    - user fields merged with the role profile
- PUT /profile    - update name/image and role-profile fields
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user
from educonnect.schemas.misc import ProfileUpdate
from educonnect.services.user_service import UserService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("")
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(UserService(db).profile_payload(current_user))


@router.put("")
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = UserService(db)
    user = await service.update_profile(current_user, profile_data)
    return success_response(service.profile_payload(user), "Profile updated successfully")
