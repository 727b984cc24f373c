"""
Class Service Layer
Class CRUD, code generation, code search and per-student class statistics
"""

import secrets
import string
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import ResourceNotFoundError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.assignment import Assignment, Submission
from educonnect.models.attendance import AttendanceSession, Attendance
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.exam import Exam, ExamAttempt
from educonnect.models.user import User, UserRole, StudentProfile, TeacherProfile
from educonnect.schemas.classroom import ClassCreate, ClassUpdate, ClassResponse
from educonnect.services import access
from educonnect.services.status import attendance_rate, round_half_up
from educonnect.utils.pagination import paginate, contains_pattern, LIKE_ESCAPE, PaginationParams

CODE_ALPHABET = string.digits + string.ascii_uppercase
CODE_RANDOM_LENGTH = 4
MAX_CODE_ATTEMPTS = 20


def generate_class_code(department: str, semester: int) -> str:
    """
    7-character join code: 2 department characters (padded with X),
    the semester as one base-36 digit, then 4 random base-36 characters.
    """
    prefix = "".join(ch for ch in (department or "").upper() if ch in CODE_ALPHABET)[:2].ljust(2, "X")
    semester_digit = CODE_ALPHABET[semester % len(CODE_ALPHABET)]
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_RANDOM_LENGTH))
    return f"{prefix}{semester_digit}{suffix}"


class ClassService:
    """Service for class operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # SERIALIZATION
    # =====================================================

    async def _count_by_class(self, column, class_ids: List[str], *conditions) -> Dict[str, int]:
        if not class_ids:
            return {}
        result = await self.db.execute(
            select(column, func.count())
            .where(column.in_(class_ids), *conditions)
            .group_by(column)
        )
        return {row[0]: row[1] for row in result.all()}

    async def serialize_many(self, classes: List[Classroom]) -> List[Dict[str, Any]]:
        ids = [c.id for c in classes]
        enrollments = await self._count_by_class(
            ClassEnrollment.class_id, ids, ClassEnrollment.status == EnrollmentStatus.APPROVED
        )
        assignments = await self._count_by_class(Assignment.class_id, ids)
        exams = await self._count_by_class(Exam.class_id, ids)

        return [
            {
                **ClassResponse.model_validate(c).model_dump(),
                "teacher": access.teacher_summary(c.teacher),
                "enrollment_count": enrollments.get(c.id, 0),
                "assignment_count": assignments.get(c.id, 0),
                "exam_count": exams.get(c.id, 0),
            }
            for c in classes
        ]

    async def serialize(self, classroom: Classroom) -> Dict[str, Any]:
        return (await self.serialize_many([classroom]))[0]

    # =====================================================
    # QUERIES
    # =====================================================

    async def list_classes(
        self, user: User, page: int, limit: int, search: Optional[str] = None
    ) -> tuple:
        """Classes visible to the caller: all (admin), owned (teacher), approved (student)"""
        query = select(Classroom)

        if user.role == UserRole.TEACHER:
            query = query.join(TeacherProfile, Classroom.teacher_id == TeacherProfile.id).where(
                TeacherProfile.user_id == user.id
            )
        elif user.role == UserRole.STUDENT:
            query = (
                query.join(ClassEnrollment, ClassEnrollment.class_id == Classroom.id)
                .join(StudentProfile, ClassEnrollment.student_id == StudentProfile.id)
                .where(
                    StudentProfile.user_id == user.id,
                    ClassEnrollment.status == EnrollmentStatus.APPROVED,
                )
            )

        if search:
            pattern = contains_pattern(search)
            query = query.where(or_(
                Classroom.name.ilike(pattern, escape=LIKE_ESCAPE),
                Classroom.code.ilike(pattern, escape=LIKE_ESCAPE),
                Classroom.subject.ilike(pattern, escape=LIKE_ESCAPE),
            ))

        query = query.order_by(Classroom.created_at.desc())
        classes, total, params = await paginate(self.db, query, page, limit)
        return await self.serialize_many(classes), total, params

    async def get_class(self, user: User, class_id: str) -> Dict[str, Any]:
        classroom = await access.get_class_or_404(self.db, class_id)
        return await self.serialize(classroom)

    async def search_by_code(self, user: User, code: str) -> Dict[str, Any]:
        if not code or len(code.strip()) < 3:
            raise ValidationError("Please enter at least 3 characters of the class code", field="code")

        result = await self.db.execute(
            select(Classroom)
            .where(
                Classroom.code.ilike(contains_pattern(code.strip()), escape=LIKE_ESCAPE),
                Classroom.is_active == True,  # noqa: E712
            )
            .order_by(Classroom.created_at.desc())
            .limit(1)
        )
        classroom = result.scalar_one_or_none()
        if classroom is None:
            raise ResourceNotFoundError("Class", code)

        enrollment_status = None
        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            if student is not None:
                enrollment = (await self.db.execute(
                    select(ClassEnrollment).where(
                        ClassEnrollment.class_id == classroom.id,
                        ClassEnrollment.student_id == student.id,
                    )
                )).scalar_one_or_none()
                enrollment_status = enrollment.status.value if enrollment else None

        data = await self.serialize(classroom)
        data["enrollment_status"] = enrollment_status
        return data

    # =====================================================
    # MUTATIONS
    # =====================================================

    async def _unique_code(self, department: str, semester: int) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_class_code(department, semester)
            exists = (await self.db.execute(
                select(Classroom.id).where(Classroom.code == code)
            )).first()
            if exists is None:
                return code
        raise ValidationError("Could not generate a unique class code, please retry")

    async def create_class(self, user: User, data: ClassCreate) -> Classroom:
        if user.role == UserRole.ADMIN and data.teacher_id:
            teacher = (await self.db.execute(
                select(TeacherProfile).where(TeacherProfile.id == data.teacher_id)
            )).scalar_one_or_none()
            if teacher is None:
                raise ResourceNotFoundError("Teacher", data.teacher_id)
        else:
            teacher = await access.get_teacher_profile(self.db, user, create=True)

        classroom = Classroom(
            name=data.name,
            description=data.description,
            department=data.department,
            semester=data.semester,
            subject=data.subject,
            code=await self._unique_code(data.department, data.semester),
            teacher_id=teacher.id,
        )
        self.db.add(classroom)
        await self.db.commit()
        await self.db.refresh(classroom)

        logger.info(f"Class created: {classroom.code} ({classroom.name}) by {user.id}")
        return classroom

    async def update_class(self, user: User, class_id: str, data: ClassUpdate) -> Classroom:
        classroom = await access.get_owned_class(self.db, user, class_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(classroom, field, value)
        await self.db.commit()
        await self.db.refresh(classroom)
        return classroom

    async def delete_class(self, user: User, class_id: str) -> None:
        classroom = await access.get_owned_class(self.db, user, class_id)
        await self.db.delete(classroom)
        await self.db.commit()
        logger.info(f"Class deleted: {class_id} by {user.id}")

    # =====================================================
    # STUDENTS & STATS
    # =====================================================

    async def class_students(self, user: User, class_id: str) -> List[Dict[str, Any]]:
        """Approved students with their assignment, exam and attendance numbers for this class"""
        await access.get_owned_class(self.db, user, class_id)

        enrollments = list((await self.db.execute(
            select(ClassEnrollment)
            .where(
                ClassEnrollment.class_id == class_id,
                ClassEnrollment.status == EnrollmentStatus.APPROVED,
            )
            .order_by(ClassEnrollment.joined_at.desc())
        )).scalars().all())
        student_ids = [e.student_id for e in enrollments]

        total_assignments = (await self.db.execute(
            select(func.count(Assignment.id)).where(Assignment.class_id == class_id)
        )).scalar() or 0
        total_exams = (await self.db.execute(
            select(func.count(Exam.id)).where(Exam.class_id == class_id)
        )).scalar() or 0
        total_sessions = (await self.db.execute(
            select(func.count(AttendanceSession.id)).where(AttendanceSession.class_id == class_id)
        )).scalar() or 0

        submissions = (await self.db.execute(
            select(Submission.student_id, Submission.marks)
            .join(Assignment, Submission.assignment_id == Assignment.id)
            .where(Assignment.class_id == class_id, Submission.student_id.in_(student_ids))
        )).all() if student_ids else []
        attempts = (await self.db.execute(
            select(ExamAttempt.student_id, ExamAttempt.obtained_marks, ExamAttempt.percentage)
            .join(Exam, ExamAttempt.exam_id == Exam.id)
            .where(Exam.class_id == class_id, ExamAttempt.student_id.in_(student_ids))
        )).all() if student_ids else []
        records = (await self.db.execute(
            select(Attendance.student_id, Attendance.status)
            .join(AttendanceSession, Attendance.session_id == AttendanceSession.id)
            .where(AttendanceSession.class_id == class_id, Attendance.student_id.in_(student_ids))
        )).all() if student_ids else []

        students = []
        for enrollment in enrollments:
            sid = enrollment.student_id
            own_submissions = [s for s in submissions if s.student_id == sid]
            own_attempts = [a for a in attempts if a.student_id == sid]
            own_statuses = [r.status for r in records if r.student_id == sid]

            graded_marks = [s.marks for s in own_submissions if s.marks is not None]
            scored = [a.percentage or 0 for a in own_attempts if a.obtained_marks is not None]

            students.append({
                **access.student_summary(enrollment.student),
                "joined_at": enrollment.joined_at,
                "stats": {
                    "assignments_completed": f"{len(own_submissions)}/{total_assignments}",
                    "exams_attempted": f"{len(own_attempts)}/{total_exams}",
                    "attendance_rate": attendance_rate(own_statuses, total=total_sessions),
                    "avg_assignment_score": round_half_up(sum(graded_marks) / len(graded_marks)) if graded_marks else None,
                    "avg_exam_score": round_half_up(sum(scored) / len(scored)) if scored else None,
                },
            })
        return students
