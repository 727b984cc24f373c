"""
Announcements API

- GET    /announcements          - role-scoped list (filter: class_id)
- POST   /announcements          - class announcement (owner) or global (admin)
- PUT    /announcements/{id}     - update (author/admin)
- DELETE /announcements/{id}     - delete (author/admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_teacher
from educonnect.schemas.misc import AnnouncementCreate, AnnouncementUpdate
from educonnect.services.announcement_service import AnnouncementService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_announcements(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    class_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await AnnouncementService(db).list_announcements(current_user, page, limit, class_id)
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    announcement_data: AnnouncementCreate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = AnnouncementService(db)
    announcement = await service.create_announcement(current_user, announcement_data)
    return success_response(service.serialize(announcement), "Announcement created")


@router.put("/{announcement_id}")
async def update_announcement(
    announcement_id: str,
    announcement_data: AnnouncementUpdate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = AnnouncementService(db)
    announcement = await service.update_announcement(current_user, announcement_id, announcement_data)
    return success_response(service.serialize(announcement), "Announcement updated")


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    await AnnouncementService(db).delete_announcement(current_user, announcement_id)
    return success_response(message="Announcement deleted")
