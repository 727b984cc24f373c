# Re-export all models for convenient imports
from educonnect.models.user import User, UserRole, StudentProfile, TeacherProfile
from educonnect.models.session import Session
from educonnect.models.rate_limit import RateLimit
from educonnect.models.audit_log import AuditLog
from educonnect.models.classroom import Classroom, ClassEnrollment, EnrollmentStatus
from educonnect.models.assignment import Assignment, Submission, SubmissionStatus
from educonnect.models.exam import (
    Exam, ExamType, ExamQuestion, QuestionType, ExamAttempt, AttemptStatus, QuestionAnswer,
    AUTO_GRADED_TYPES,
)
from educonnect.models.attendance import AttendanceSession, Attendance, AttendanceStatus
from educonnect.models.chat import ChatRoom, ChatRoomType, ChatRoomMember, MemberRole, ChatMessage
from educonnect.models.notification import Notification, NotificationType
from educonnect.models.task import Task, TaskPriority, TaskStatus
from educonnect.models.announcement import Announcement, AnnouncementPriority

__all__ = [
    # Users
    "User",
    "UserRole",
    "StudentProfile",
    "TeacherProfile",
    # Auth
    "Session",
    "RateLimit",
    "AuditLog",
    # Classes
    "Classroom",
    "ClassEnrollment",
    "EnrollmentStatus",
    # Assignments
    "Assignment",
    "Submission",
    "SubmissionStatus",
    # Exams
    "Exam",
    "ExamType",
    "ExamQuestion",
    "QuestionType",
    "ExamAttempt",
    "AttemptStatus",
    "QuestionAnswer",
    "AUTO_GRADED_TYPES",
    # Attendance
    "AttendanceSession",
    "Attendance",
    "AttendanceStatus",
    # Chat
    "ChatRoom",
    "ChatRoomType",
    "ChatRoomMember",
    "MemberRole",
    "ChatMessage",
    # Misc
    "Notification",
    "NotificationType",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Announcement",
    "AnnouncementPriority",
]
