from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class EnrollmentStatus(str, enum.Enum):
    """Join request lifecycle: PENDING -> APPROVED | REJECTED"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Classroom(Base):
    """A class taught by one teacher; students join it by code"""
    __tablename__ = "classes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    code = Column(String(20), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    department = Column(String(255), nullable=False)
    semester = Column(Integer, nullable=False)
    subject = Column(String(255), nullable=False)
    teacher_id = Column(GUID, ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teacher = relationship("TeacherProfile", back_populates="classes", lazy="selectin")
    enrollments = relationship("ClassEnrollment", back_populates="classroom", cascade="all, delete-orphan", passive_deletes=True)
    assignments = relationship("Assignment", back_populates="classroom", cascade="all, delete-orphan", passive_deletes=True)
    exams = relationship("Exam", back_populates="classroom", cascade="all, delete-orphan", passive_deletes=True)
    attendance_sessions = relationship("AttendanceSession", back_populates="classroom", cascade="all, delete-orphan", passive_deletes=True)
    announcements = relationship("Announcement", back_populates="classroom", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Classroom {self.code} {self.name}>"


class ClassEnrollment(Base):
    """A student's membership request for a class"""
    __tablename__ = "class_enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(EnrollmentStatus), default=EnrollmentStatus.PENDING, nullable=False)
    joined_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classroom = relationship("Classroom", back_populates="enrollments", lazy="selectin")
    student = relationship("StudentProfile", back_populates="enrollments", lazy="selectin")

    def __repr__(self):
        return f"<ClassEnrollment {self.class_id}/{self.student_id} {self.status}>"
