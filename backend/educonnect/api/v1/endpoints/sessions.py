"""
Session management endpoints

- GET    /sessions            - active sessions of the caller (admin: any user_id)
- DELETE /sessions/{id}       - revoke one session (owner or admin)
- DELETE /sessions?all=true   - revoke all other sessions (admin: all of user_id)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.session import Session
from educonnect.models.user import User, UserRole
from educonnect.modules.auth.dependencies import get_current_user, get_current_session
from educonnect.schemas.auth import SessionResponse
from educonnect.services.session_service import SessionService
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_sessions(
    user_id: Optional[str] = Query(None, description="Admin only: list another user's sessions"),
    current_user: User = Depends(get_current_user),
    current_session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_db)
):
    target = current_user.id
    if user_id and user_id != current_user.id:
        if current_user.role != UserRole.ADMIN:
            raise AuthorizationError()
        target = user_id

    sessions = await SessionService(db).list_user_sessions(target)
    data = []
    for s in sessions:
        item = SessionResponse.model_validate(s).model_dump()
        item["current"] = s.id == current_session.id
        data.append(item)
    return success_response(data)


@router.delete("/{session_id}")
async def revoke_session(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SessionService(db)
    session = await service.get_by_id(session_id)
    if session is None:
        raise ResourceNotFoundError("Session", session_id)
    if session.user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise AuthorizationError()

    await service.delete_session_by_id(session_id)
    logger.info(f"Session {session_id} revoked by {current_user.id}")
    return success_response(message="Session revoked")


@router.delete("")
async def revoke_all_sessions(
    all: bool = Query(False),
    user_id: Optional[str] = Query(None, description="Admin only: revoke every session of this user"),
    current_user: User = Depends(get_current_user),
    current_session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_db)
):
    if not all:
        raise ValidationError("Pass all=true to revoke sessions", field="all")

    service = SessionService(db)
    if user_id and user_id != current_user.id:
        if current_user.role != UserRole.ADMIN:
            raise AuthorizationError()
        revoked = await service.delete_all_user_sessions(user_id)
    else:
        revoked = await service.delete_all_user_sessions(
            current_user.id, keep_token=current_session.session_token
        )

    return success_response({"revoked": revoked}, f"Revoked {revoked} session(s)")
