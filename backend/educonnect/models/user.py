from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False)
    image = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
    teacher_profile = relationship(
        "TeacherProfile", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"


class StudentProfile(Base):
    """Academic details of a student account"""
    __tablename__ = "student_profiles"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    enrollment_no = Column(String(50), nullable=True)
    phone = Column(String(20), nullable=True)
    department = Column(String(255), nullable=True)
    semester = Column(Integer, nullable=True)
    section = Column(String(20), nullable=True)
    batch = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="student_profile", lazy="selectin")
    enrollments = relationship("ClassEnrollment", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<StudentProfile {self.user_id}>"


class TeacherProfile(Base):
    """Academic details of a teacher account"""
    __tablename__ = "teacher_profiles"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    department = Column(String(255), nullable=True)
    subject = Column(String(255), nullable=True)
    university = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    designation = Column(String(255), nullable=True)
    qualification = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="teacher_profile", lazy="selectin")
    classes = relationship("Classroom", back_populates="teacher", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<TeacherProfile {self.user_id}>"
