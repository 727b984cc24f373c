"""
Announcement Service Layer
Class announcements from teachers and global announcements from admins
"""

from typing import Any, Dict, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import AuthorizationError, ResourceNotFoundError
from educonnect.core.logging_config import logger
from educonnect.models.announcement import Announcement, AnnouncementPriority
from educonnect.models.notification import NotificationType
from educonnect.models.user import User, UserRole
from educonnect.schemas.misc import AnnouncementCreate, AnnouncementUpdate, AnnouncementResponse
from educonnect.services import access
from educonnect.services.assignment_service import class_brief
from educonnect.services.notification_service import NotificationService
from educonnect.utils.pagination import paginate


class AnnouncementService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    def serialize(self, announcement: Announcement) -> Dict[str, Any]:
        data = AnnouncementResponse.model_validate(announcement).model_dump()
        data["class"] = class_brief(announcement.classroom)
        author = announcement.author
        data["author"] = {"id": author.id, "name": author.name, "role": author.role} if author else None
        return data

    async def _get_or_404(self, announcement_id: str) -> Announcement:
        announcement = (await self.db.execute(
            select(Announcement).where(Announcement.id == announcement_id)
        )).scalar_one_or_none()
        if announcement is None:
            raise ResourceNotFoundError("Announcement", announcement_id)
        return announcement

    async def _get_editable(self, user: User, announcement_id: str) -> Announcement:
        announcement = await self._get_or_404(announcement_id)
        if announcement.author_id != user.id and not access.is_admin(user):
            raise AuthorizationError()
        return announcement

    async def list_announcements(
        self, user: User, page: int, limit: int, class_id: Optional[str] = None
    ) -> tuple:
        query = select(Announcement)

        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            class_ids = await access.approved_class_ids(self.db, student.id) if student else []
            query = query.where(or_(Announcement.class_id.in_(class_ids), Announcement.is_global == True))  # noqa: E712
        elif user.role == UserRole.TEACHER:
            class_ids = await access.teacher_class_ids(self.db, user)
            query = query.where(or_(
                Announcement.class_id.in_(class_ids),
                Announcement.author_id == user.id,
                Announcement.is_global == True,  # noqa: E712
            ))

        if class_id:
            query = query.where(Announcement.class_id == class_id)

        items, total, params = await paginate(
            self.db, query.order_by(Announcement.created_at.desc()), page, limit
        )
        return [self.serialize(a) for a in items], total, params

    async def create_announcement(self, user: User, data: AnnouncementCreate) -> Announcement:
        if data.is_global and not access.is_admin(user):
            raise AuthorizationError("Only admins can create global announcements")

        classroom = None
        if data.class_id:
            classroom = await access.get_owned_class(self.db, user, data.class_id)

        announcement = Announcement(
            title=data.title,
            content=data.content,
            class_id=classroom.id if classroom else None,
            author_id=user.id,
            priority=data.priority,
            is_global=data.is_global,
        )
        self.db.add(announcement)

        notified = 0
        if classroom is not None:
            notified = self.notifications.notify_many(
                await access.approved_student_user_ids(self.db, classroom.id),
                "New Announcement",
                f"{classroom.name}: {data.title}",
                NotificationType.WARNING if data.priority == AnnouncementPriority.URGENT else NotificationType.INFO,
                link="/dashboard/student/announcements",
            )

        await self.db.commit()
        await self.db.refresh(announcement)
        logger.info(f"Announcement {announcement.id} by {user.id} (global={data.is_global}), notified {notified}")
        return announcement

    async def update_announcement(self, user: User, announcement_id: str, data: AnnouncementUpdate) -> Announcement:
        announcement = await self._get_editable(user, announcement_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(announcement, field, value)
        await self.db.commit()
        await self.db.refresh(announcement)
        return announcement

    async def delete_announcement(self, user: User, announcement_id: str) -> None:
        announcement = await self._get_editable(user, announcement_id)
        await self.db.delete(announcement)
        await self.db.commit()
