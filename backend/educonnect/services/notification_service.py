"""
Notification Service - in-app notifications (notifications table)
Other services call `notify` / `notify_many` as a side effect of domain events.
"""

from typing import Iterable, Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update, func, and_

from educonnect.core.exceptions import ResourceNotFoundError
from educonnect.core.logging_config import logger
from educonnect.models.notification import Notification, NotificationType
from educonnect.utils.pagination import paginate, PaginationParams


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str = NotificationType.INFO.value,
        link: Optional[str] = None,
    ) -> Notification:
        """Stage a notification; the caller's commit persists it with the triggering change"""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type.value if isinstance(type, NotificationType) else type,
            link=link,
        )
        self.db.add(notification)
        logger.debug(f"Notify {user_id}: {title}")
        return notification

    def notify_many(
        self,
        user_ids: Iterable[str],
        title: str,
        message: str,
        type: str = NotificationType.INFO.value,
        link: Optional[str] = None,
    ) -> int:
        count = 0
        for user_id in user_ids:
            self.notify(user_id, title, message, type, link)
            count += 1
        return count

    async def list_for_user(
        self, user_id: str, page: int, limit: int, unread_only: bool = False
    ) -> Tuple[List[Notification], int, PaginationParams, int]:
        """Page of notifications plus the user's overall unread count"""
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.read == False)  # noqa: E712

        query = (
            select(Notification)
            .where(and_(*conditions))
            .order_by(Notification.created_at.desc())
        )
        items, total, params = await paginate(self.db, query, page, limit)

        unread_count = await self.unread_count(user_id)
        return items, total, params, unread_count

    async def unread_count(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.read == False  # noqa: E712
            )
        )
        return result.scalar() or 0

    async def _get_owned(self, notification_id: str, user_id: str) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise ResourceNotFoundError("Notification", notification_id)
        return notification

    async def mark_read(self, user_id: str, notification_id: Optional[str] = None, mark_all: bool = False) -> int:
        if mark_all:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
                .values(read=True)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount

        notification = await self._get_owned(notification_id, user_id)
        notification.read = True
        await self.db.commit()
        return 1

    async def delete(self, user_id: str, notification_id: Optional[str] = None, delete_all: bool = False) -> int:
        if delete_all:
            result = await self.db.execute(
                delete(Notification).where(Notification.user_id == user_id)
            )
            await self.db.commit()
            return result.rowcount

        notification = await self._get_owned(notification_id, user_id)
        await self.db.delete(notification)
        await self.db.commit()
        return 1

    async def recent(self, user_id: str, limit: int = 5) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
