from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from educonnect.models.user import UserRole


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value


class AdminClassCreate(BaseModel):
    name: str = Field(..., min_length=2)
    department: str = Field(..., min_length=1)
    semester: int = Field(..., ge=1, le=12)
    subject: str = Field(..., min_length=1)
    description: Optional[str] = None
    teacher_id: str = Field(..., min_length=1, description="Teacher profile id")
