"""
User Service Layer
Account creation, credential checks and the self-service profile
"""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.core.security import get_password_hash, verify_password
from educonnect.models.user import User, UserRole, StudentProfile, TeacherProfile
from educonnect.schemas.auth import (
    UserRegister,
    UserResponse,
    StudentProfileResponse,
    TeacherProfileResponse,
)
from educonnect.schemas.misc import ProfileUpdate
from educonnect.services import access


EMAIL_TAKEN = "An account with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"

STUDENT_FIELDS = (
    "enrollment_no", "phone", "department", "semester", "section",
    "batch", "address", "guardian_name", "guardian_phone",
)
TEACHER_FIELDS = ("department", "subject", "university", "phone", "designation", "qualification")


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(self, data: UserRegister) -> User:
        """Create the user and the profile for its role in one transaction"""
        if await self.get_by_email(data.email) is not None:
            raise ValidationError(EMAIL_TAKEN, field="email")

        user = User(
            name=data.name.strip(),
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=data.role,
        )
        self.db.add(user)
        await self.db.flush()

        if data.role == UserRole.STUDENT:
            self.db.add(StudentProfile(user_id=user.id, phone=data.phone, department=data.department))
        elif data.role == UserRole.TEACHER:
            self.db.add(TeacherProfile(
                user_id=user.id,
                phone=data.phone,
                department=data.department,
                subject=data.subject,
                university=data.university,
            ))

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ValidationError(EMAIL_TAKEN, field="email")

        return await self.reload(user)

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise AuthorizationError("Account is inactive")
        return user

    async def reload(self, user: User) -> User:
        """Re-read a user together with both profile relationships"""
        result = await self.db.execute(
            select(User).where(User.id == user.id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # =====================================================
    # PROFILE
    # =====================================================

    def profile_payload(self, user: User) -> Dict[str, Any]:
        """User fields merged with the role profile"""
        data = UserResponse.model_validate(user).model_dump()
        profile = None
        if user.student_profile is not None:
            profile = StudentProfileResponse.model_validate(user.student_profile).model_dump()
        elif user.teacher_profile is not None:
            profile = TeacherProfileResponse.model_validate(user.teacher_profile).model_dump()

        if profile:
            data["profile_id"] = profile.pop("id")
            data.update(profile)
        return data

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name"):
            user.name = changes["name"].strip()
        if "image" in changes:
            user.image = changes["image"]

        if user.role == UserRole.STUDENT:
            profile = await access.get_student_profile(self.db, user, create=True)
            for field in STUDENT_FIELDS:
                if field in changes:
                    setattr(profile, field, changes[field])
        elif user.role == UserRole.TEACHER:
            profile = await access.get_teacher_profile(self.db, user, create=True)
            for field in TEACHER_FIELDS:
                if field in changes:
                    setattr(profile, field, changes[field])

        await self.db.commit()
        logger.debug(f"Profile updated for {user.id}: {sorted(changes)}")
        return await self.reload(user)
