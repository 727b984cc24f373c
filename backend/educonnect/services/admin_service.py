"""
Admin Service Layer
Platform analytics, user management with audit trail, class management
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import select, func, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import UserNotFoundError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.assignment import Assignment, Submission
from educonnect.models.audit_log import AuditLog
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.exam import Exam
from educonnect.models.user import User, UserRole
from educonnect.schemas.admin import AdminUserUpdate, AdminClassCreate
from educonnect.schemas.auth import UserResponse, UserWithProfileResponse
from educonnect.schemas.classroom import ClassCreate
from educonnect.services.class_service import ClassService
from educonnect.services.session_service import SessionService
from educonnect.services.status import grading_rate
from educonnect.utils.pagination import paginate, contains_pattern, LIKE_ESCAPE


AUDITED_USER_FIELDS = ("name", "email", "role", "is_active")


def log_admin_action(
    db: AsyncSession,
    admin_id: str,
    action: str,
    entity: str,
    entity_id: Optional[str] = None,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
) -> AuditLog:
    """Stage an audit entry; it is committed together with the audited change"""
    entry = AuditLog(
        user_id=admin_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        old_value=old_value,
        new_value=new_value,
    )
    db.add(entry)
    return entry


def audit_snapshot(user: User) -> Dict[str, Any]:
    return {
        "name": user.name,
        "email": user.email,
        "role": user.role.value if user.role else None,
        "is_active": user.is_active,
    }


class AdminService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.classes = ClassService(db)
        self.sessions = SessionService(db)

    async def _count(self, column, *conditions) -> int:
        query = select(func.count(column))
        if conditions:
            query = query.where(and_(*conditions))
        return (await self.db.execute(query)).scalar() or 0

    # =====================================================
    # ANALYTICS
    # =====================================================

    async def analytics(self, days: int = 30) -> Dict[str, Any]:
        since = datetime.utcnow() - timedelta(days=days)

        total_users = await self._count(User.id)
        students = await self._count(User.id, User.role == UserRole.STUDENT)
        teachers = await self._count(User.id, User.role == UserRole.TEACHER)
        admins = await self._count(User.id, User.role == UserRole.ADMIN)

        total_submissions = await self._count(Submission.id)
        graded_submissions = await self._count(Submission.id, Submission.marks.is_not(None))

        enrollment_rows = (await self.db.execute(
            select(ClassEnrollment.status, func.count()).group_by(ClassEnrollment.status)
        )).all()

        recent_users = (await self.db.execute(
            select(User).order_by(User.created_at.desc()).limit(5)
        )).scalars().all()

        return {
            "overview": {
                "total_users": total_users,
                "total_students": students,
                "total_teachers": teachers,
                "total_classes": await self._count(Classroom.id),
                "active_classes": await self._count(Classroom.id, Classroom.is_active == True),  # noqa: E712
                "total_assignments": await self._count(Assignment.id),
                "total_exams": await self._count(Exam.id),
                "pending_enrollments": await self._count(
                    ClassEnrollment.id, ClassEnrollment.status == EnrollmentStatus.PENDING
                ),
            },
            "submissions": {
                "total": total_submissions,
                "graded": graded_submissions,
                "grading_rate": grading_rate(graded_submissions, total_submissions),
            },
            "user_distribution": {
                "students": students,
                "teachers": teachers,
                "admins": admins,
            },
            "recent_users": [UserResponse.model_validate(u).model_dump() for u in recent_users],
            "growth": {
                "days": days,
                "new_students": await self._count(
                    User.id, User.role == UserRole.STUDENT, User.created_at >= since
                ),
                "new_teachers": await self._count(
                    User.id, User.role == UserRole.TEACHER, User.created_at >= since
                ),
            },
            "enrollments": {status.value: count for status, count in enrollment_rows},
        }

    # =====================================================
    # USERS
    # =====================================================

    async def list_users(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> tuple:
        query = select(User)
        if search:
            pattern = contains_pattern(search)
            query = query.where(or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if role:
            query = query.where(User.role == role)

        users, total, params = await paginate(self.db, query.order_by(User.created_at.desc()), page, limit)
        return [UserWithProfileResponse.model_validate(u).model_dump() for u in users], total, params

    async def get_user(self, user_id: str) -> User:
        user = (await self.db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_user(self, admin: User, user_id: str, data: AdminUserUpdate) -> User:
        user = await self.get_user(user_id)
        before = audit_snapshot(user)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "email" in changes and changes["email"] != user.email:
            taken = (await self.db.execute(
                select(User.id).where(User.email == changes["email"], User.id != user.id)
            )).first()
            if taken is not None:
                raise ValidationError("An account with this email already exists", field="email")

        for field in AUDITED_USER_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])

        log_admin_action(self.db, admin.id, "UPDATE", "User", user.id, before, audit_snapshot(user))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError("An account with this email already exists", field="email")

        if before["is_active"] and not user.is_active:
            await self.sessions.delete_all_user_sessions(user.id)

        logger.info(f"Admin {admin.id} updated user {user.id}: {sorted(changes)}")
        await self.db.refresh(user)
        return user

    async def delete_user(self, admin: User, user_id: str) -> None:
        if user_id == admin.id:
            raise ValidationError("Cannot delete your own account")

        user = await self.get_user(user_id)
        log_admin_action(self.db, admin.id, "DELETE", "User", user.id, audit_snapshot(user), None)
        await self.sessions.delete_all_user_sessions(user.id)

        await self.db.delete(user)
        await self.db.commit()
        logger.warning(f"Admin {admin.id} deleted user {user_id}")

    # =====================================================
    # CLASSES
    # =====================================================

    async def list_classes(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        department: Optional[str] = None,
    ) -> tuple:
        query = select(Classroom)
        if search:
            pattern = contains_pattern(search)
            query = query.where(or_(
                Classroom.name.ilike(pattern, escape=LIKE_ESCAPE),
                Classroom.code.ilike(pattern, escape=LIKE_ESCAPE),
                Classroom.subject.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if department:
            query = query.where(Classroom.department == department)

        classes, total, params = await paginate(
            self.db, query.order_by(Classroom.created_at.desc()), page, limit
        )
        return await self.classes.serialize_many(classes), total, params

    async def create_class(self, admin: User, data: AdminClassCreate) -> Classroom:
        classroom = await self.classes.create_class(admin, ClassCreate(**data.model_dump()))
        log_admin_action(self.db, admin.id, "CREATE", "Class", classroom.id, None, {
            "name": classroom.name,
            "code": classroom.code,
            "teacher_id": classroom.teacher_id,
        })
        await self.db.commit()
        return classroom
