from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from educonnect.models.attendance import AttendanceStatus
from educonnect.schemas.common import UTCDateTime


class AttendanceRecordInput(BaseModel):
    student_id: str
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: Optional[str] = None


class AttendanceSessionCreate(BaseModel):
    class_id: str = Field(..., min_length=1)
    date: UTCDateTime
    topic: Optional[str] = None
    records: List[AttendanceRecordInput] = Field(default_factory=list)


class AttendanceRecordsUpdate(BaseModel):
    topic: Optional[str] = None
    records: List[AttendanceRecordInput] = Field(default_factory=list)


class AttendanceRecordResponse(BaseModel):
    id: str
    student_id: str
    status: AttendanceStatus
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class AttendanceSessionResponse(BaseModel):
    id: str
    class_id: str
    date: datetime
    topic: Optional[str] = None
    created_at: datetime
    records: List[AttendanceRecordResponse] = []

    class Config:
        from_attributes = True
