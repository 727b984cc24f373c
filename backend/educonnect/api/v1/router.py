from fastapi import APIRouter
from educonnect.api.v1.endpoints import (
    auth, sessions, profile, classes, enrollments, assignments, submissions, exams, exam_attempts,
    attendance, chat, notifications, tasks, announcements, student, teacher,
)
from educonnect.api.v1.endpoints.admin import admin_router

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check for load balancers"""
    return {"status": "healthy", "service": "educonnect-backend"}


# Auth & account
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])

# Classes & enrollment
api_router.include_router(classes.router, prefix="/classes", tags=["Classes"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])

# Coursework
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
api_router.include_router(submissions.router, prefix="/submissions", tags=["Submissions"])
api_router.include_router(exams.router, prefix="/exams", tags=["Exams"])
api_router.include_router(exam_attempts.router, prefix="/exam-attempts", tags=["Exam Attempts"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])

# Communication
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])

# Role dashboards
api_router.include_router(student.router, prefix="/student", tags=["Student"])
api_router.include_router(teacher.router, prefix="/teacher", tags=["Teacher"])

# Admin
api_router.include_router(admin_router)
