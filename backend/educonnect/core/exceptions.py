"""
Custom Exceptions for EduConnect
================================

Services raise these instead of HTTPException so the same error can be
produced from a route, a dependency or a background helper. The application
handler in main.py renders them with `error_response`.

Usage:
    from educonnect.core.exceptions import ClassNotFoundError, AuthorizationError

    if not classroom:
        raise ClassNotFoundError(class_id)

    if classroom.teacher_id != teacher.id:
        raise AuthorizationError()
"""

from typing import Optional, Any, Dict


class EduConnectError(Exception):
    """Base exception for all EduConnect errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(EduConnectError):
    """No valid session for this request"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class AuthorizationError(EduConnectError):
    """Caller's role or ownership does not allow this action"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


class SessionExpiredError(AuthenticationError):
    """Session token has expired"""

    def __init__(self):
        super().__init__("Session has expired")
        self.code = "SESSION_EXPIRED"


class NotEnrolledError(AuthorizationError):
    """Student has no approved enrollment in the class"""

    def __init__(self, class_id: Optional[str] = None):
        super().__init__("Not enrolled in this class")
        self.code = "NOT_ENROLLED"
        if class_id:
            self.details["class_id"] = class_id


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(EduConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        super().__init__(
            message,
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class ClassNotFoundError(ResourceNotFoundError):
    def __init__(self, class_id: Optional[str] = None):
        super().__init__("Class", class_id)


class AssignmentNotFoundError(ResourceNotFoundError):
    def __init__(self, assignment_id: Optional[str] = None):
        super().__init__("Assignment", assignment_id)


class SubmissionNotFoundError(ResourceNotFoundError):
    def __init__(self, submission_id: Optional[str] = None):
        super().__init__("Submission", submission_id)


class ExamNotFoundError(ResourceNotFoundError):
    def __init__(self, exam_id: Optional[str] = None):
        super().__init__("Exam", exam_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(EduConnectError):
    """Input or state validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(EduConnectError):
    """Request conflicts with existing data (duplicate enrollment, email, ...)"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


# ============================================
# Rate Limiting
# ============================================

class RateLimitExceededError(EduConnectError):
    """Too many requests in the current window"""

    status_code = 429

    def __init__(self, endpoint: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            "Too many requests",
            code="RATE_LIMIT_EXCEEDED",
            details={"endpoint": endpoint}
        )
        self.headers = headers or {}


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: EduConnectError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
