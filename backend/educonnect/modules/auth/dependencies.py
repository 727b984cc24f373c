from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Callable

from educonnect.core.database import get_db
from educonnect.core.exceptions import AuthenticationError, AuthorizationError
from educonnect.core.logging_config import set_user_id
from educonnect.core.security import extract_session_token
from educonnect.models.session import Session
from educonnect.models.user import User, UserRole
from educonnect.services.session_service import SessionService


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Resolve the caller from the session cookie (or bearer token); None when signed out"""
    token = extract_session_token(request)
    resolved = await SessionService(db).get_session(token)
    if resolved is None:
        return None

    session, user = resolved
    request.state.session = session
    set_user_id(str(user.id))
    return user


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user)
) -> User:
    """Get current authenticated user"""
    if user is None:
        raise AuthenticationError()
    return user


async def get_current_session(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> Session:
    """The Session row backing this request"""
    return request.state.session


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.post("/")
        async def create(user: User = Depends(require_roles(UserRole.TEACHER, UserRole.ADMIN))):
            ...
    """
    allowed = set(roles)

    async def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError()
        return current_user

    return _check_role


get_current_student = require_roles(UserRole.STUDENT)
get_current_teacher = require_roles(UserRole.TEACHER, UserRole.ADMIN)
get_current_admin = require_roles(UserRole.ADMIN)
