"""
Attendance API

- GET    /attendance                 - role-scoped sessions (filters: class_id, start_date, end_date)
- POST   /attendance                 - record a session with its records (teacher/admin)
- PUT    /attendance/{session_id}    - upsert records / change topic (owner/admin)
- DELETE /attendance/{session_id}    - delete a session (owner/admin)
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user, get_current_teacher
from educonnect.schemas.attendance import AttendanceSessionCreate, AttendanceRecordsUpdate
from educonnect.schemas.common import naive_utc
from educonnect.services.attendance_service import AttendanceService
from educonnect.utils.responses import success_response, paginated_response

router = APIRouter()


@router.get("")
async def list_attendance(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    class_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    data, total, params = await AttendanceService(db).list_sessions(
        current_user,
        page,
        limit,
        class_id=class_id,
        start_date=naive_utc(start_date) if start_date else None,
        end_date=naive_utc(end_date) if end_date else None,
    )
    return paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_attendance(
    session_data: AttendanceSessionCreate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = AttendanceService(db)
    session = await service.create_session(current_user, session_data)
    return success_response(service.serialize(session), "Attendance recorded successfully")


@router.put("/{session_id}")
async def update_attendance(
    session_id: str,
    records_data: AttendanceRecordsUpdate,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    service = AttendanceService(db)
    session = await service.update_records(current_user, session_id, records_data)
    return success_response(service.serialize(session), "Attendance updated successfully")


@router.delete("/{session_id}")
async def delete_attendance(
    session_id: str,
    current_user: User = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db)
):
    await AttendanceService(db).delete_session(current_user, session_id)
    return success_response(message="Attendance session deleted")
