"""
Notifications API

- GET    /notifications          - caller's notifications (paginated, unread=true filter) + unread_count
- PUT    /notifications          - mark one (notification_id) or all (mark_all) as read
- DELETE /notifications          - delete one (id) or all (all=true)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.core.exceptions import ValidationError
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user
from educonnect.schemas.misc import NotificationResponse, MarkNotificationsRead
from educonnect.services.notification_service import NotificationService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_notifications(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    unread: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    items, total, params, unread_count = await NotificationService(db).list_for_user(
        current_user.id, page, limit, unread_only=unread
    )
    data = [NotificationResponse.model_validate(n).model_dump() for n in items]
    return paginated_response(data, total, params.page, params.limit, unread_count=unread_count)


@router.put("")
async def mark_notifications_read(
    body: MarkNotificationsRead,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    updated = await NotificationService(db).mark_read(
        current_user.id, notification_id=body.notification_id, mark_all=body.mark_all
    )
    return success_response({"updated": updated}, "Notifications marked as read")


@router.delete("")
async def delete_notifications(
    id: Optional[str] = Query(None),
    all: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not id and not all:
        raise ValidationError("Pass id or all=true", field="id")

    deleted = await NotificationService(db).delete(current_user.id, notification_id=id, delete_all=all)
    return success_response({"deleted": deleted}, "Notifications deleted")
