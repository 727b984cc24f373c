"""
Student views

- GET /student/dashboard      - counts, classes and recent notifications
- GET /student/assignments    - assignments with derived status (filters: status, class_id)
- GET /student/exams          - exams with window status and own attempt (filters: type, class_id)
- GET /student/attendance     - per-session status and stats (filters: class_id, month, year)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.exam import ExamType
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_student
from educonnect.services.assignment_service import AssignmentService
from educonnect.services.attendance_service import AttendanceService
from educonnect.services.dashboard_service import DashboardService
from educonnect.services.exam_service import ExamService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("/dashboard")
async def student_dashboard(
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await DashboardService(db).student_dashboard(current_user))


@router.get("/assignments")
async def student_assignments(
    status: Optional[str] = Query(None, description="pending | submitted | graded | overdue"),
    class_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await AssignmentService(db).student_board(current_user, status, class_id))


@router.get("/exams")
async def student_exams(
    type: Optional[ExamType] = Query(None),
    class_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ExamService(db).student_board(current_user, type, class_id))


@router.get("/attendance")
async def student_attendance(
    class_id: Optional[str] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9998),
    current_user: User = Depends(get_current_student),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await AttendanceService(db).student_report(current_user, class_id, month, year))
