"""
Authentication endpoints

- POST /auth/signup  - create an account and sign in
- POST /auth/login   - email + password sign in
- POST /auth/logout  - drop the current session
- GET  /auth/me      - the signed-in user with profile
"""
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.config import settings
from educonnect.core.database import get_db
from educonnect.core.exceptions import EduConnectError
from educonnect.core.logging_config import logger, set_user_id
from educonnect.core.security import extract_session_token, get_client_ip
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user
from educonnect.schemas.auth import UserRegister, UserLogin, UserWithProfileResponse
from educonnect.services.session_service import SessionService
from educonnect.services.user_service import UserService
from educonnect.utils.responses import success_response

router = APIRouter()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request: Request,
    response: Response,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a student, teacher or admin and start a session"""
    client_ip = get_client_ip(request)
    users = UserService(db)

    try:
        user = await users.register(user_data)
    except EduConnectError as e:
        logger.log_auth_event(
            event="signup",
            success=False,
            user_email=user_data.email,
            reason=e.message,
            client_ip=client_ip
        )
        raise

    session = await SessionService(db).create_session(
        user, ip_address=client_ip, user_agent=request.headers.get("user-agent")
    )
    set_session_cookie(response, session.session_token)
    set_user_id(str(user.id))

    logger.log_auth_event(
        event="signup",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return success_response(
        UserWithProfileResponse.model_validate(user).model_dump(),
        "Account created successfully",
    )


@router.post("/login")
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Check credentials and issue a session cookie"""
    client_ip = get_client_ip(request)
    users = UserService(db)

    try:
        user = await users.authenticate(credentials.email, credentials.password)
    except EduConnectError as e:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason=e.message,
            client_ip=client_ip
        )
        raise

    session = await SessionService(db).create_session(
        user, ip_address=client_ip, user_agent=request.headers.get("user-agent")
    )
    set_session_cookie(response, session.session_token)
    set_user_id(str(user.id))

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return success_response(
        {
            "user": UserWithProfileResponse.model_validate(user).model_dump(),
            "session_token": session.session_token,
            "expires": session.expires,
        },
        "Logged in successfully",
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Delete the caller's session; succeeds even when already signed out"""
    token = extract_session_token(request)
    if token:
        await SessionService(db).delete_session(token)
    clear_session_cookie(response)

    logger.log_auth_event(event="logout", success=True, client_ip=get_client_ip(request))
    return success_response(message="Logged out successfully")


@router.get("/me")
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user info"""
    return success_response(UserWithProfileResponse.model_validate(current_user).model_dump())
