"""
Enrollment Service Layer

Join requests move PENDING -> APPROVED | REJECTED. A student whose request
was rejected may ask again, which puts the same row back to PENDING.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ResourceNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from educonnect.core.logging_config import logger
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.notification import NotificationType
from educonnect.models.user import User, UserRole, StudentProfile
from educonnect.schemas.classroom import EnrollmentResponse
from educonnect.services import access
from educonnect.services.notification_service import NotificationService


ALREADY_PENDING = "You have already requested to join this class"
ALREADY_ENROLLED = "You are already enrolled in this class"


class EnrollmentService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    def serialize(self, enrollment: ClassEnrollment, include_class: bool = True) -> Dict[str, Any]:
        data = EnrollmentResponse.model_validate(enrollment).model_dump()
        data["student"] = access.student_summary(enrollment.student)
        if include_class and enrollment.classroom is not None:
            c = enrollment.classroom
            data["class"] = {
                "id": c.id,
                "name": c.name,
                "code": c.code,
                "subject": c.subject,
                "department": c.department,
                "semester": c.semester,
                "teacher": access.teacher_summary(c.teacher),
            }
        return data

    # =====================================================
    # JOIN REQUESTS
    # =====================================================

    async def request_join(
        self, user: User, code: Optional[str] = None, class_id: Optional[str] = None
    ) -> tuple:
        """
        Ask to join a class by code or id.

        Returns (enrollment, created) where created is False for a re-request
        after rejection.
        """
        if code is not None:
            classroom = (await self.db.execute(
                select(Classroom).where(Classroom.code == code.upper())
            )).scalar_one_or_none()
            if classroom is None:
                raise ResourceNotFoundError("Class", code)
        else:
            classroom = await access.get_class_or_404(self.db, class_id)

        if not classroom.is_active:
            raise ValidationError("This class is no longer active")

        student = await access.get_student_profile(self.db, user)
        if student is None:
            student = StudentProfile(
                user_id=user.id,
                department=classroom.department,
                semester=classroom.semester,
            )
            self.db.add(student)
            await self.db.flush()

        enrollment = (await self.db.execute(
            select(ClassEnrollment).where(
                ClassEnrollment.class_id == classroom.id,
                ClassEnrollment.student_id == student.id,
            )
        )).scalar_one_or_none()

        created = False
        if enrollment is not None:
            if enrollment.status == EnrollmentStatus.PENDING:
                raise ConflictError(ALREADY_PENDING)
            if enrollment.status == EnrollmentStatus.APPROVED:
                raise ConflictError(ALREADY_ENROLLED)
            enrollment.status = EnrollmentStatus.PENDING
            enrollment.joined_at = None
        else:
            enrollment = ClassEnrollment(
                class_id=classroom.id,
                student_id=student.id,
                status=EnrollmentStatus.PENDING,
            )
            self.db.add(enrollment)
            created = True

        if classroom.teacher is not None:
            self.notifications.notify(
                classroom.teacher.user_id,
                "New Join Request",
                f"{user.name} has requested to join {classroom.name}",
                NotificationType.INFO,
                link=f"/dashboard/teacher/classes/{classroom.id}/requests",
            )

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(ALREADY_PENDING)

        await self.db.refresh(enrollment)
        logger.info(f"Join request {enrollment.id}: student {student.id} -> class {classroom.code}")
        return enrollment, created

    # =====================================================
    # LISTING
    # =====================================================

    async def list_enrollments(
        self, user: User, class_id: Optional[str] = None, status: Optional[EnrollmentStatus] = None
    ) -> List[Dict[str, Any]]:
        query = select(ClassEnrollment)

        if user.role == UserRole.STUDENT:
            student = await access.get_student_profile(self.db, user)
            if student is None:
                return []
            query = query.where(ClassEnrollment.student_id == student.id)
        elif user.role == UserRole.TEACHER:
            if class_id:
                await access.get_owned_class(self.db, user, class_id)
            owned = await access.teacher_class_ids(self.db, user)
            query = query.where(ClassEnrollment.class_id.in_(owned))

        if class_id:
            query = query.where(ClassEnrollment.class_id == class_id)
        if status:
            query = query.where(ClassEnrollment.status == status)

        enrollments = list((await self.db.execute(
            query.order_by(ClassEnrollment.created_at.desc())
        )).scalars().all())
        data = [self.serialize(e) for e in enrollments]

        if user.role == UserRole.STUDENT and enrollments:
            class_ids = list({e.class_id for e in enrollments})
            counts = dict((await self.db.execute(
                select(ClassEnrollment.class_id, func.count())
                .where(
                    ClassEnrollment.class_id.in_(class_ids),
                    ClassEnrollment.status == EnrollmentStatus.APPROVED,
                )
                .group_by(ClassEnrollment.class_id)
            )).all())
            for item in data:
                if "class" in item:
                    item["class"]["student_count"] = counts.get(item["class_id"], 0)

        return data

    async def pending_requests(self, user: User, class_id: str) -> List[Dict[str, Any]]:
        await access.get_owned_class(self.db, user, class_id)
        result = await self.db.execute(
            select(ClassEnrollment)
            .where(
                ClassEnrollment.class_id == class_id,
                ClassEnrollment.status == EnrollmentStatus.PENDING,
            )
            .order_by(ClassEnrollment.created_at.desc())
        )
        return [self.serialize(e, include_class=False) for e in result.scalars().all()]

    # =====================================================
    # TEACHER ACTIONS
    # =====================================================

    async def _get(self, enrollment_id: str) -> ClassEnrollment:
        enrollment = (await self.db.execute(
            select(ClassEnrollment).where(ClassEnrollment.id == enrollment_id)
        )).scalar_one_or_none()
        if enrollment is None:
            raise ResourceNotFoundError("Enrollment", enrollment_id)
        return enrollment

    async def review(self, user: User, enrollment_id: str, status: EnrollmentStatus) -> ClassEnrollment:
        enrollment = await self._get(enrollment_id)
        classroom = enrollment.classroom
        access.assert_class_owner(user, classroom)

        enrollment.status = status
        enrollment.joined_at = datetime.utcnow() if status == EnrollmentStatus.APPROVED else None

        if status == EnrollmentStatus.APPROVED:
            self.notifications.notify(
                enrollment.student.user_id,
                "Request Approved",
                f"Your request to join {classroom.name} has been approved",
                NotificationType.SUCCESS,
                link=f"/dashboard/student/classes/{classroom.id}",
            )
        else:
            self.notifications.notify(
                enrollment.student.user_id,
                "Request Rejected",
                f"Your request to join {classroom.name} has been rejected",
                NotificationType.WARNING,
            )

        await self.db.commit()
        await self.db.refresh(enrollment)
        logger.info(f"Enrollment {enrollment.id} {status.value} by {user.id}")
        return enrollment

    async def add_student(self, user: User, class_id: str, email: str) -> ClassEnrollment:
        """Enroll a student directly, skipping the request step"""
        classroom = await access.get_owned_class(self.db, user, class_id)

        student_user = (await self.db.execute(
            select(User).where(User.email == email.lower())
        )).scalar_one_or_none()
        if student_user is None or student_user.role != UserRole.STUDENT:
            raise UserNotFoundError(email)

        student = await access.get_student_profile(self.db, student_user, create=True)

        enrollment = (await self.db.execute(
            select(ClassEnrollment).where(
                ClassEnrollment.class_id == classroom.id,
                ClassEnrollment.student_id == student.id,
            )
        )).scalar_one_or_none()

        now = datetime.utcnow()
        if enrollment is None:
            enrollment = ClassEnrollment(
                class_id=classroom.id,
                student_id=student.id,
                status=EnrollmentStatus.APPROVED,
                joined_at=now,
            )
            self.db.add(enrollment)
        else:
            enrollment.status = EnrollmentStatus.APPROVED
            enrollment.joined_at = enrollment.joined_at or now

        self.notifications.notify(
            student_user.id,
            "Added to Class",
            f"You have been added to {classroom.name}",
            NotificationType.SUCCESS,
            link=f"/dashboard/student/classes/{classroom.id}",
        )
        await self.db.commit()
        await self.db.refresh(enrollment)
        return enrollment

    async def remove(self, user: User, enrollment_id: str) -> None:
        enrollment = await self._get(enrollment_id)

        is_self = enrollment.student is not None and enrollment.student.user_id == user.id
        if not is_self and not access.owns_class(user, enrollment.classroom):
            raise AuthorizationError()

        await self.db.delete(enrollment)
        await self.db.commit()
        logger.info(f"Enrollment {enrollment_id} removed by {user.id}")
