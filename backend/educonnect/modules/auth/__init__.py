# Authentication module

from educonnect.modules.auth.dependencies import (
    get_optional_user,
    get_current_user,
    get_current_session,
    require_roles,
    get_current_student,
    get_current_teacher,
    get_current_admin,
)

__all__ = [
    "get_optional_user",
    "get_current_user",
    "get_current_session",
    "require_roles",
    "get_current_student",
    "get_current_teacher",
    "get_current_admin",
]
