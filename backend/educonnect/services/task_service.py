"""
Task Service - personal to-do items
"""

from datetime import datetime
from typing import List

from sqlalchemy import select, case
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import ResourceNotFoundError
from educonnect.core.logging_config import logger
from educonnect.models.task import Task, TaskStatus
from educonnect.models.user import User
from educonnect.schemas.misc import TaskCreate, TaskUpdate


STATUS_ORDER = case(
    (Task.status == TaskStatus.TODO, 0),
    (Task.status == TaskStatus.IN_PROGRESS, 1),
    else_=2,
)


class TaskService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_own(self, user: User, task_id: str) -> Task:
        # Someone else's task is indistinguishable from a missing one
        task = (await self.db.execute(
            select(Task).where(Task.id == task_id, Task.user_id == user.id)
        )).scalar_one_or_none()
        if task is None:
            raise ResourceNotFoundError("Task", task_id)
        return task

    async def list_tasks(self, user: User) -> List[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.user_id == user.id)
            .order_by(STATUS_ORDER, Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_task(self, user: User, data: TaskCreate) -> Task:
        task = Task(
            user_id=user.id,
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=data.status,
            due_date=data.due_date,
            completed_at=datetime.utcnow() if data.status == TaskStatus.COMPLETED else None,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def update_task(self, user: User, task_id: str, data: TaskUpdate) -> Task:
        task = await self._get_own(user, task_id)
        changes = data.model_dump(exclude_unset=True)

        for field in ("title", "description", "priority", "due_date"):
            if field in changes and (changes[field] is not None or field in ("description", "due_date")):
                setattr(task, field, changes[field])

        status = changes.get("status")
        if status is not None and status != task.status:
            task.status = status
            task.completed_at = datetime.utcnow() if status == TaskStatus.COMPLETED else None

        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete_task(self, user: User, task_id: str) -> None:
        task = await self._get_own(user, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.debug(f"Task {task_id} deleted by {user.id}")
