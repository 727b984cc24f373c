from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from educonnect.models.user import UserRole


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str
    role: UserRole = UserRole.STUDENT
    phone: Optional[str] = None

    # Teacher details
    department: Optional[str] = None
    subject: Optional[str] = None
    university: Optional[str] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode='after')
    def validate_signup(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")

        if self.role == UserRole.TEACHER:
            missing_fields = [
                label for label, value in (
                    ('Department', self.department),
                    ('Subject', self.subject),
                    ('University', self.university),
                )
                if not value or not value.strip()
            ]
            if missing_fields:
                raise ValueError(f"Required fields for teachers: {', '.join(missing_fields)}")

        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class StudentProfileResponse(BaseModel):
    id: str
    enrollment_no: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None
    section: Optional[str] = None
    batch: Optional[str] = None
    address: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None

    class Config:
        from_attributes = True


class TeacherProfileResponse(BaseModel):
    id: str
    department: Optional[str] = None
    subject: Optional[str] = None
    university: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    qualification: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    image: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserWithProfileResponse(UserResponse):
    student_profile: Optional[StudentProfileResponse] = None
    teacher_profile: Optional[TeacherProfileResponse] = None


class UserSummary(BaseModel):
    """Minimal user block embedded in other resources"""
    id: str
    name: str
    email: str
    image: Optional[str] = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    id: str
    user_id: str
    expires: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    current: bool = False

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    user: UserWithProfileResponse
    session_token: str
    expires: datetime
