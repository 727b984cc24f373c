from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class SubmissionStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    LATE = "LATE"
    GRADED = "GRADED"


class Assignment(Base):
    """Homework posted to a class"""
    __tablename__ = "assignments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    instructions = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=False, index=True)
    total_marks = Column(Integer, default=100, nullable=False)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    attachments = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classroom = relationship("Classroom", back_populates="assignments", lazy="selectin")
    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Assignment {self.title}>"


class Submission(Base):
    """A student's answer to an assignment; one per student"""
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    assignment_id = Column(GUID, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    attachments = Column(JSON, default=list)
    status = Column(SQLEnum(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False)
    marks = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    graded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignment = relationship("Assignment", back_populates="submissions", lazy="selectin")
    student = relationship("StudentProfile", lazy="selectin")

    def __repr__(self):
        return f"<Submission {self.assignment_id}/{self.student_id} {self.status}>"
