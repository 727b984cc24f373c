from datetime import datetime, timedelta
from typing import Optional
import uuid

import bcrypt
from fastapi import Request

from educonnect.core.config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def generate_session_token() -> str:
    """Opaque session token; carries no claims, only looked up server-side"""
    return str(uuid.uuid4())


def session_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(days=settings.SESSION_EXPIRE_DAYS)


def extract_session_token(request: Request) -> Optional[str]:
    """
    Read the session token from the cookie, falling back to
    `Authorization: Bearer <token>` for API clients.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_client_ip(request: Request) -> str:
    """Client address as seen through proxies: first x-forwarded-for hop, then x-real-ip"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return "unknown"
