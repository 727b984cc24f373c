"""
Teacher views

- GET /teacher/dashboard    - class, student, request and grading counts
- GET /teacher/exams        - exams with window status and attempt stats (filters: class_id, status)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_teacher
from educonnect.services.dashboard_service import DashboardService
from educonnect.services.exam_service import ExamService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("/dashboard")
async def teacher_dashboard(
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await DashboardService(db).teacher_dashboard(current_user))


@router.get("/exams")
async def teacher_exams(
    class_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="upcoming | ongoing | past"),
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ExamService(db).teacher_board(current_user, class_id, status))
