# API endpoints
from . import (
    auth, sessions, profile, classes, enrollments, assignments, submissions, exams, exam_attempts,
    attendance, chat, notifications, tasks, announcements, student, teacher,
)

__all__ = [
    "auth", "sessions", "profile", "classes", "enrollments", "assignments", "submissions", "exams",
    "exam_attempts", "attendance", "chat", "notifications", "tasks", "announcements", "student", "teacher",
]
