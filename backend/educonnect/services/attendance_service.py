"""
Attendance Service Layer
Roll-call sessions per class and the student attendance report
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import ResourceNotFoundError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.attendance import Attendance, AttendanceSession, AttendanceStatus
from educonnect.models.user import User, UserRole
from educonnect.schemas.attendance import (
    AttendanceRecordInput,
    AttendanceRecordsUpdate,
    AttendanceSessionCreate,
    AttendanceSessionResponse,
)
from educonnect.services import access
from educonnect.services.assignment_service import class_brief
from educonnect.services.status import attendance_rate
from educonnect.utils.pagination import paginate


DUPLICATE_SESSION = "Attendance session already exists for this date"
NOT_ENROLLED_STUDENT = "Student is not enrolled in this class"


def month_bounds(month: int, year: int) -> tuple:
    """[first day of month, first day of next month)"""
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


class AttendanceService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_404(self, session_id: str, reload: bool = False) -> AttendanceSession:
        query = select(AttendanceSession).where(AttendanceSession.id == session_id)
        if reload:
            query = query.execution_options(populate_existing=True)
        session = (await self.db.execute(query)).scalar_one_or_none()
        if session is None:
            raise ResourceNotFoundError("Attendance session", session_id)
        return session

    def serialize(self, session: AttendanceSession) -> Dict[str, Any]:
        data = AttendanceSessionResponse.model_validate(session).model_dump()
        data["class"] = class_brief(session.classroom)
        students = {r.student_id: r.student for r in session.records}
        for record in data["records"]:
            record["student"] = access.student_summary(students.get(record["student_id"]))
        statuses = [r.status for r in session.records]
        data["summary"] = {
            "total": len(statuses),
            "present": statuses.count(AttendanceStatus.PRESENT),
            "absent": statuses.count(AttendanceStatus.ABSENT),
            "late": statuses.count(AttendanceStatus.LATE),
            "excused": statuses.count(AttendanceStatus.EXCUSED),
        }
        return data

    async def _apply_records(
        self, session: AttendanceSession, class_id: str, records: List[AttendanceRecordInput]
    ) -> None:
        """Upsert one record per student on the session; students must be approved in the class"""
        existing = {r.student_id: r for r in session.records}
        if records:
            allowed = {s.id for s in await access.approved_students(self.db, class_id)} | set(existing)
            if any(item.student_id not in allowed for item in records):
                raise ValidationError(NOT_ENROLLED_STUDENT, field="records")

        for item in records:
            record = existing.get(item.student_id)
            if record is None:
                record = Attendance(student_id=item.student_id, status=item.status, remarks=item.remarks)
                session.records.append(record)
                existing[item.student_id] = record
            else:
                record.status = item.status
                record.remarks = item.remarks

    # =====================================================
    # TEACHER
    # =====================================================

    async def create_session(self, user: User, data: AttendanceSessionCreate) -> AttendanceSession:
        classroom = await access.get_owned_class(self.db, user, data.class_id)

        duplicate = (await self.db.execute(
            select(AttendanceSession.id).where(
                AttendanceSession.class_id == classroom.id,
                AttendanceSession.date == data.date,
            )
        )).scalar_one_or_none()
        if duplicate is not None:
            raise ValidationError(DUPLICATE_SESSION, field="date")

        session = AttendanceSession(class_id=classroom.id, date=data.date, topic=data.topic, records=[])
        await self._apply_records(session, classroom.id, data.records)
        self.db.add(session)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError(DUPLICATE_SESSION, field="date")

        session = await self.get_or_404(session.id, reload=True)
        logger.info(f"Attendance session {session.id} for {classroom.code} with {len(data.records)} record(s)")
        return session

    async def update_records(self, user: User, session_id: str, data: AttendanceRecordsUpdate) -> AttendanceSession:
        session = await self.get_or_404(session_id)
        access.assert_class_owner(user, session.classroom)

        await self._apply_records(session, session.class_id, data.records)
        if data.topic is not None:
            session.topic = data.topic
        await self.db.commit()

        return await self.get_or_404(session_id, reload=True)

    async def delete_session(self, user: User, session_id: str) -> None:
        session = await self.get_or_404(session_id)
        access.assert_class_owner(user, session.classroom)
        await self.db.delete(session)
        await self.db.commit()
        logger.info(f"Attendance session {session_id} deleted by {user.id}")

    async def list_sessions(
        self,
        user: User,
        page: int,
        limit: int,
        class_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> tuple:
        query = select(AttendanceSession)

        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            class_ids = await access.approved_class_ids(self.db, student.id) if student else []
            query = query.where(AttendanceSession.class_id.in_(class_ids))
        elif user.role == UserRole.TEACHER:
            query = query.where(AttendanceSession.class_id.in_(await access.teacher_class_ids(self.db, user)))

        if class_id:
            query = query.where(AttendanceSession.class_id == class_id)
        if start_date:
            query = query.where(AttendanceSession.date >= start_date)
        if end_date:
            query = query.where(AttendanceSession.date <= end_date)

        sessions, total, params = await paginate(
            self.db, query.order_by(AttendanceSession.date.desc()), page, limit
        )
        return [self.serialize(s) for s in sessions], total, params

    # =====================================================
    # STUDENT
    # =====================================================

    async def student_report(
        self,
        user: User,
        class_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Per-session status for the student; a session without a record counts as absent"""
        student = await access.get_student_profile(self.db, user)
        class_ids = await access.approved_class_ids(self.db, student.id) if student else []
        if class_id:
            class_ids = [c for c in class_ids if c == class_id]

        sessions: List[AttendanceSession] = []
        if class_ids:
            query = select(AttendanceSession).where(AttendanceSession.class_id.in_(class_ids))
            if month and year:
                start, end = month_bounds(month, year)
                query = query.where(AttendanceSession.date >= start, AttendanceSession.date < end)
            sessions = list((await self.db.execute(
                query.order_by(AttendanceSession.date.desc())
            )).scalars().all())

        records = []
        for session in sessions:
            own = next((r for r in session.records if r.student_id == student.id), None)
            records.append({
                "id": session.id,
                "date": session.date,
                "topic": session.topic,
                "class": class_brief(session.classroom),
                "status": own.status if own else AttendanceStatus.ABSENT,
                "remarks": own.remarks if own else None,
            })

        statuses = [r["status"] for r in records]
        return {
            "records": records,
            "stats": {
                "total": len(statuses),
                "present": statuses.count(AttendanceStatus.PRESENT),
                "absent": statuses.count(AttendanceStatus.ABSENT),
                "late": statuses.count(AttendanceStatus.LATE),
                "excused": statuses.count(AttendanceStatus.EXCUSED),
                "rate": attendance_rate(statuses),
            },
        }
