"""
Dashboard Service
Aggregated home-screen data for students and teachers
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.models.assignment import Assignment, Submission
from educonnect.models.attendance import Attendance, AttendanceSession
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.exam import Exam
from educonnect.models.user import User
from educonnect.schemas.auth import StudentProfileResponse, TeacherProfileResponse
from educonnect.schemas.misc import NotificationResponse
from educonnect.services import access
from educonnect.services.assignment_service import class_brief
from educonnect.services.class_service import ClassService
from educonnect.services.notification_service import NotificationService
from educonnect.services.status import attendance_rate


RECENT_LIMIT = 5


def user_brief(user: User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "image": user.image}


class DashboardService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.classes = ClassService(db)
        self.notifications = NotificationService(db)

    async def _classes_by_id(self, class_ids):
        if not class_ids:
            return []
        result = await self.db.execute(
            select(Classroom).where(Classroom.id.in_(class_ids)).order_by(Classroom.created_at.desc())
        )
        return list(result.scalars().all())

    async def student_dashboard(self, user: User) -> Dict[str, Any]:
        now = datetime.utcnow()
        student = await access.get_student_profile(self.db, user)
        class_ids = await access.approved_class_ids(self.db, student.id) if student else []

        pending_assignments = 0
        upcoming_exams = 0
        rate = 0
        if class_ids:
            submitted = select(Submission.assignment_id).where(Submission.student_id == student.id)
            pending_assignments = (await self.db.execute(
                select(func.count(Assignment.id)).where(
                    Assignment.class_id.in_(class_ids),
                    Assignment.is_active == True,  # noqa: E712
                    Assignment.due_date >= now,
                    Assignment.id.not_in(submitted),
                )
            )).scalar() or 0

            upcoming_exams = (await self.db.execute(
                select(func.count(Exam.id)).where(
                    Exam.class_id.in_(class_ids),
                    Exam.is_active == True,  # noqa: E712
                    Exam.end_time >= now,
                )
            )).scalar() or 0

            total_sessions = (await self.db.execute(
                select(func.count(AttendanceSession.id)).where(AttendanceSession.class_id.in_(class_ids))
            )).scalar() or 0
            statuses = (await self.db.execute(
                select(Attendance.status)
                .join(AttendanceSession, Attendance.session_id == AttendanceSession.id)
                .where(AttendanceSession.class_id.in_(class_ids), Attendance.student_id == student.id)
            )).scalars().all()
            rate = attendance_rate(statuses, total=total_sessions)

        recent = await self.notifications.recent(user.id, RECENT_LIMIT)
        return {
            "student": {
                **user_brief(user),
                "profile": StudentProfileResponse.model_validate(student).model_dump() if student else None,
            },
            "stats": {
                "enrolled_classes": len(class_ids),
                "pending_assignments": pending_assignments,
                "upcoming_exams": upcoming_exams,
                "attendance_rate": rate,
            },
            "classes": await self.classes.serialize_many(await self._classes_by_id(class_ids)),
            "notifications": [NotificationResponse.model_validate(n).model_dump() for n in recent],
        }

    async def teacher_dashboard(self, user: User) -> Dict[str, Any]:
        now = datetime.utcnow()
        teacher = await access.get_teacher_profile(self.db, user)
        class_ids = await access.teacher_class_ids(self.db, user)

        total_students = 0
        pending_requests = 0
        pending_grading = 0
        recent_submissions = []
        upcoming_exams = []

        if class_ids:
            total_students = (await self.db.execute(
                select(func.count(func.distinct(ClassEnrollment.student_id))).where(
                    ClassEnrollment.class_id.in_(class_ids),
                    ClassEnrollment.status == EnrollmentStatus.APPROVED,
                )
            )).scalar() or 0

            pending_requests = (await self.db.execute(
                select(func.count(ClassEnrollment.id)).where(
                    ClassEnrollment.class_id.in_(class_ids),
                    ClassEnrollment.status == EnrollmentStatus.PENDING,
                )
            )).scalar() or 0

            in_my_classes = select(Assignment.id).where(Assignment.class_id.in_(class_ids))
            pending_grading = (await self.db.execute(
                select(func.count(Submission.id)).where(
                    Submission.assignment_id.in_(in_my_classes),
                    Submission.marks.is_(None),
                )
            )).scalar() or 0

            for sub in (await self.db.execute(
                select(Submission)
                .where(Submission.assignment_id.in_(in_my_classes))
                .order_by(Submission.submitted_at.desc())
                .limit(RECENT_LIMIT)
            )).scalars().all():
                recent_submissions.append({
                    "id": sub.id,
                    "status": sub.status,
                    "marks": sub.marks,
                    "submitted_at": sub.submitted_at,
                    "student": access.student_summary(sub.student),
                    "assignment": {"id": sub.assignment.id, "title": sub.assignment.title},
                })

            for exam in (await self.db.execute(
                select(Exam)
                .where(Exam.class_id.in_(class_ids), Exam.start_time > now)
                .order_by(Exam.start_time.asc())
                .limit(RECENT_LIMIT)
            )).scalars().all():
                upcoming_exams.append({
                    "id": exam.id,
                    "title": exam.title,
                    "type": exam.type,
                    "start_time": exam.start_time,
                    "end_time": exam.end_time,
                    "class": class_brief(exam.classroom),
                })

        return {
            "teacher": {
                **user_brief(user),
                "profile": TeacherProfileResponse.model_validate(teacher).model_dump() if teacher else None,
            },
            "stats": {
                "total_classes": len(class_ids),
                "total_students": total_students,
                "pending_requests": pending_requests,
                "pending_grading": pending_grading,
            },
            "classes": await self.classes.serialize_many(await self._classes_by_id(class_ids)),
            "recent_submissions": recent_submissions,
            "upcoming_exams": upcoming_exams,
        }
