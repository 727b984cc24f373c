from sqlalchemy import (
    Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class AttendanceSession(Base):
    """One roll call of a class on a given date"""
    __tablename__ = "attendance_sessions"
    __table_args__ = (
        UniqueConstraint("class_id", "date", name="uq_attendance_session_class_date"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    topic = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    classroom = relationship("Classroom", back_populates="attendance_sessions", lazy="selectin")
    records = relationship(
        "Attendance", back_populates="session", cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )

    def __repr__(self):
        return f"<AttendanceSession {self.class_id} {self.date}>"


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    session_id = Column(GUID, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(AttendanceStatus), default=AttendanceStatus.PRESENT, nullable=False)
    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    session = relationship("AttendanceSession", back_populates="records")
    student = relationship("StudentProfile", lazy="selectin")

    def __repr__(self):
        return f"<Attendance {self.session_id}/{self.student_id} {self.status}>"
