from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime

from educonnect.models.assignment import SubmissionStatus
from educonnect.schemas.common import UTCDateTime


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=2)
    description: str = Field(..., min_length=10)
    instructions: Optional[str] = None
    due_date: UTCDateTime
    total_marks: int = Field(100, ge=1)
    class_id: str = Field(..., min_length=1)
    attachments: List[Any] = Field(default_factory=list)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = Field(None, min_length=10)
    instructions: Optional[str] = None
    due_date: Optional[UTCDateTime] = None
    total_marks: Optional[int] = Field(None, ge=1)
    attachments: Optional[List[Any]] = None
    is_active: Optional[bool] = None


class AssignmentResponse(BaseModel):
    id: str
    title: str
    description: str
    instructions: Optional[str] = None
    due_date: datetime
    total_marks: int
    class_id: str
    attachments: Optional[List[Any]] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionCreate(BaseModel):
    content: Optional[str] = None
    attachments: List[Any] = Field(default_factory=list)


class GradeSubmission(BaseModel):
    # Range and integrality are checked against the assignment in the service
    marks: Optional[float] = None
    feedback: Optional[str] = None


class SubmissionResponse(BaseModel):
    id: str
    assignment_id: str
    student_id: str
    content: Optional[str] = None
    attachments: Optional[List[Any]] = None
    status: SubmissionStatus
    marks: Optional[int] = None
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
