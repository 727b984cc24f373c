"""
Tasks API - personal to-do items, visible only to their owner

- GET    /tasks          - caller's tasks (by status, then newest)
- POST   /tasks          - create (rate limited per user)
- PUT    /tasks/{id}     - update
- DELETE /tasks/{id}     - delete
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.core.rate_limiter import create_task_rate_limit
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user
from educonnect.schemas.misc import TaskCreate, TaskUpdate, TaskResponse
from educonnect.services.task_service import TaskService
from educonnect.utils.responses import success_response

router = APIRouter()


def _task_data(task) -> dict:
    return TaskResponse.model_validate(task).model_dump()


@router.get("")
async def list_tasks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tasks = await TaskService(db).list_tasks(current_user)
    return success_response([_task_data(t) for t in tasks])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    _rate_limit=Depends(create_task_rate_limit),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).create_task(current_user, task_data)
    return success_response(_task_data(task), "Task created")


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).update_task(current_user, task_id, task_data)
    return success_response(_task_data(task), "Task updated")


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await TaskService(db).delete_task(current_user, task_id)
    return success_response(message="Task deleted")
