from educonnect.services.session_service import SessionService
from educonnect.services.notification_service import NotificationService
from educonnect.services.user_service import UserService

# Classroom domain
from educonnect.services.class_service import ClassService
from educonnect.services.enrollment_service import EnrollmentService
from educonnect.services.assignment_service import AssignmentService
from educonnect.services.submission_service import SubmissionService
from educonnect.services.exam_service import ExamService
from educonnect.services.attempt_service import AttemptService
from educonnect.services.attendance_service import AttendanceService

# Communication and personal
from educonnect.services.chat_service import ChatService
from educonnect.services.announcement_service import AnnouncementService
from educonnect.services.task_service import TaskService

# Aggregates
from educonnect.services.dashboard_service import DashboardService
from educonnect.services.admin_service import AdminService

__all__ = [
    # Core services
    "SessionService",
    "NotificationService",
    "UserService",
    # Classroom domain
    "ClassService",
    "EnrollmentService",
    "AssignmentService",
    "SubmissionService",
    "ExamService",
    "AttemptService",
    "AttendanceService",
    # Communication and personal
    "ChatService",
    "AnnouncementService",
    "TaskService",
    # Aggregates
    "DashboardService",
    "AdminService",
]
