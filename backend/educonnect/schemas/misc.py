"""Schemas for notifications, tasks, announcements and profile"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime

from educonnect.models.announcement import AnnouncementPriority
from educonnect.models.task import TaskPriority, TaskStatus
from educonnect.schemas.common import UTCDateTime


# ============================================
# Notifications
# ============================================

class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: str
    link: Optional[str] = None
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MarkNotificationsRead(BaseModel):
    notification_id: Optional[str] = None
    mark_all: bool = False

    @model_validator(mode='after')
    def needs_target(self):
        if not self.mark_all and not self.notification_id:
            raise ValueError("notification_id or mark_all is required")
        return self


# ============================================
# Tasks
# ============================================

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[UTCDateTime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[UTCDateTime] = None


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Announcements
# ============================================

class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=2)
    content: str = Field(..., min_length=1)
    class_id: Optional[str] = None
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    is_global: bool = False

    @model_validator(mode='after')
    def needs_scope(self):
        if not self.is_global and not self.class_id:
            raise ValueError("class_id is required for class announcements")
        return self


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    content: Optional[str] = Field(None, min_length=1)
    priority: Optional[AnnouncementPriority] = None


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: str
    class_id: Optional[str] = None
    author_id: str
    priority: AnnouncementPriority
    is_global: bool
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Profile
# ============================================

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    image: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None

    # Student
    enrollment_no: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1, le=12)
    section: Optional[str] = None
    batch: Optional[str] = None
    address: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None

    # Teacher
    subject: Optional[str] = None
    university: Optional[str] = None
    designation: Optional[str] = None
    qualification: Optional[str] = None
