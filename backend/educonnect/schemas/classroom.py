from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from educonnect.models.classroom import EnrollmentStatus


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=2)
    department: str = Field(..., min_length=1)
    semester: int = Field(..., ge=1, le=12)
    subject: str = Field(..., min_length=1)
    description: Optional[str] = None
    teacher_id: Optional[str] = Field(None, description="Teacher profile id; honoured for admins only")


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    department: Optional[str] = Field(None, min_length=1)
    semester: Optional[int] = Field(None, ge=1, le=12)
    subject: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class JoinClassRequest(BaseModel):
    code: str = Field(..., min_length=7, max_length=7)

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, value: str) -> str:
        return value.strip().upper()


class AddStudentRequest(BaseModel):
    email: EmailStr

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class EnrollmentReview(BaseModel):
    status: EnrollmentStatus

    @field_validator('status')
    @classmethod
    def must_be_decision(cls, value: EnrollmentStatus) -> EnrollmentStatus:
        if value == EnrollmentStatus.PENDING:
            raise ValueError("Status must be APPROVED or REJECTED")
        return value


class ClassResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    department: str
    semester: int
    subject: str
    teacher_id: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class EnrollmentResponse(BaseModel):
    id: str
    class_id: str
    student_id: str
    status: EnrollmentStatus
    joined_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
