"""
Shared lookups and ownership checks used by the domain services.

Ownership rule: a teacher acts only on classes whose teacher profile is
theirs; an admin acts on every class.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import (
    AuthorizationError,
    ClassNotFoundError,
    NotEnrolledError,
    ResourceNotFoundError,
)
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.user import User, UserRole, StudentProfile, TeacherProfile


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


async def get_student_profile(db: AsyncSession, user: User, create: bool = False) -> Optional[StudentProfile]:
    result = await db.execute(select(StudentProfile).where(StudentProfile.user_id == user.id))
    profile = result.scalar_one_or_none()
    if profile is None and create:
        profile = StudentProfile(user_id=user.id)
        db.add(profile)
        await db.flush()
    return profile


async def get_teacher_profile(db: AsyncSession, user: User, create: bool = False) -> Optional[TeacherProfile]:
    result = await db.execute(select(TeacherProfile).where(TeacherProfile.user_id == user.id))
    profile = result.scalar_one_or_none()
    if profile is None and create:
        profile = TeacherProfile(user_id=user.id)
        db.add(profile)
        await db.flush()
    return profile


async def require_student_profile(db: AsyncSession, user: User) -> StudentProfile:
    profile = await get_student_profile(db, user)
    if profile is None:
        raise ResourceNotFoundError("Student profile", str(user.id))
    return profile


async def get_class_or_404(db: AsyncSession, class_id: str) -> Classroom:
    result = await db.execute(select(Classroom).where(Classroom.id == class_id))
    classroom = result.scalar_one_or_none()
    if classroom is None:
        raise ClassNotFoundError(class_id)
    return classroom


def owns_class(user: User, classroom: Classroom) -> bool:
    if is_admin(user):
        return True
    return (
        user.role == UserRole.TEACHER
        and classroom.teacher is not None
        and classroom.teacher.user_id == user.id
    )


def assert_class_owner(user: User, classroom: Classroom) -> None:
    if not owns_class(user, classroom):
        raise AuthorizationError()


async def get_owned_class(db: AsyncSession, user: User, class_id: str) -> Classroom:
    classroom = await get_class_or_404(db, class_id)
    assert_class_owner(user, classroom)
    return classroom


async def teacher_class_ids(db: AsyncSession, user: User) -> List[str]:
    result = await db.execute(
        select(Classroom.id)
        .join(TeacherProfile, Classroom.teacher_id == TeacherProfile.id)
        .where(TeacherProfile.user_id == user.id)
    )
    return [row[0] for row in result.all()]


async def approved_class_ids(db: AsyncSession, student_profile_id: str) -> List[str]:
    result = await db.execute(
        select(ClassEnrollment.class_id).where(
            ClassEnrollment.student_id == student_profile_id,
            ClassEnrollment.status == EnrollmentStatus.APPROVED,
        )
    )
    return [row[0] for row in result.all()]


async def approved_student_user_ids(db: AsyncSession, class_id: str) -> List[str]:
    """User ids of every approved student of a class (notification fan-out)"""
    result = await db.execute(
        select(StudentProfile.user_id)
        .join(ClassEnrollment, ClassEnrollment.student_id == StudentProfile.id)
        .where(
            ClassEnrollment.class_id == class_id,
            ClassEnrollment.status == EnrollmentStatus.APPROVED,
        )
    )
    return [row[0] for row in result.all()]


async def approved_students(db: AsyncSession, class_id: str) -> List[StudentProfile]:
    result = await db.execute(
        select(StudentProfile)
        .join(ClassEnrollment, ClassEnrollment.student_id == StudentProfile.id)
        .where(
            ClassEnrollment.class_id == class_id,
            ClassEnrollment.status == EnrollmentStatus.APPROVED,
        )
    )
    return list(result.scalars().all())


async def require_approved_enrollment(db: AsyncSession, student_profile_id: str, class_id: str) -> ClassEnrollment:
    result = await db.execute(
        select(ClassEnrollment).where(
            ClassEnrollment.class_id == class_id,
            ClassEnrollment.student_id == student_profile_id,
            ClassEnrollment.status == EnrollmentStatus.APPROVED,
        )
    )
    enrollment = result.scalar_one_or_none()
    if enrollment is None:
        raise NotEnrolledError(class_id)
    return enrollment


def teacher_summary(teacher: Optional[TeacherProfile]) -> Optional[dict]:
    if teacher is None:
        return None
    user = teacher.user
    return {
        "id": teacher.id,
        "user_id": teacher.user_id,
        "name": user.name if user else None,
        "email": user.email if user else None,
        "image": user.image if user else None,
        "department": teacher.department,
        "subject": teacher.subject,
    }


def student_summary(student: Optional[StudentProfile]) -> Optional[dict]:
    if student is None:
        return None
    user = student.user
    return {
        "id": student.id,
        "user_id": student.user_id,
        "name": user.name if user else None,
        "email": user.email if user else None,
        "image": user.image if user else None,
        "enrollment_no": student.enrollment_no,
        "department": student.department,
        "semester": student.semester,
        "section": student.section,
    }
