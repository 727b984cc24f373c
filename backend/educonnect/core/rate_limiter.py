"""
Fixed-window rate limiting backed by the rate_limits table.

The counter lives in the database so every worker process shares it.
Errors talking to the database never block a request: the check fails open.

Usage:
    @router.post("/join", dependencies=[Depends(RateLimiter("enroll", 10, 60))])
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import Depends, Request, Response
from sqlalchemy import delete, select, update, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.config import settings
from educonnect.core.database import get_db
from educonnect.core.exceptions import RateLimitExceededError
from educonnect.core.logging_config import logger
from educonnect.core.security import get_client_ip
from educonnect.models.rate_limit import RateLimit
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_optional_user


@dataclass
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset: datetime

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset.isoformat() + "Z",
        }


async def check_rate_limit(
    db: AsyncSession,
    identifier: str,
    endpoint: str,
    max_requests: int = settings.RATE_LIMIT_DEFAULT_MAX,
    window_ms: int = settings.RATE_LIMIT_DEFAULT_WINDOW_MS,
    now: Optional[datetime] = None,
) -> RateLimitResult:
    """
    Count one request for (identifier, endpoint) and decide whether it may proceed.

    The first request of a window opens it with count=1. Requests are allowed
    while count < max_requests; the increment is a single guarded UPDATE so two
    concurrent requests can never both take the last slot.
    """
    now = now or datetime.utcnow()
    window = timedelta(milliseconds=window_ms)
    window_start_cutoff = now - window

    try:
        # Drop windows that have already closed
        await db.execute(
            delete(RateLimit).where(RateLimit.window_start < window_start_cutoff)
        )

        result = await db.execute(
            select(RateLimit).where(
                and_(RateLimit.identifier == identifier, RateLimit.endpoint == endpoint)
            )
        )
        entry = result.scalar_one_or_none()

        if entry is None or entry.window_start < window_start_cutoff:
            if entry is None:
                db.add(RateLimit(
                    identifier=identifier,
                    endpoint=endpoint,
                    count=1,
                    window_start=now,
                ))
            else:
                entry.count = 1
                entry.window_start = now
            try:
                await db.commit()
            except IntegrityError:
                # Another request opened the window first; count against it
                await db.rollback()
                return await _increment(db, identifier, endpoint, max_requests, window)

            return RateLimitResult(True, max_requests, max_requests - 1, now + window)

        if entry.count >= max_requests:
            await db.commit()
            return RateLimitResult(False, max_requests, 0, entry.window_start + window)

        await db.commit()
        return await _increment(db, identifier, endpoint, max_requests, window)

    except SQLAlchemyError as e:
        await db.rollback()
        logger.log_error_with_context(e, context="rate_limit", endpoint=endpoint)
        return RateLimitResult(True, max_requests, max_requests, now + window)


async def _increment(
    db: AsyncSession,
    identifier: str,
    endpoint: str,
    max_requests: int,
    window: timedelta,
) -> RateLimitResult:
    key = and_(RateLimit.identifier == identifier, RateLimit.endpoint == endpoint)

    updated = await db.execute(
        update(RateLimit)
        .where(key, RateLimit.count < max_requests)
        .values(count=RateLimit.count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    row = (await db.execute(
        select(RateLimit.count, RateLimit.window_start).where(key)
    )).one()

    if updated.rowcount == 0:
        return RateLimitResult(False, max_requests, 0, row.window_start + window)

    return RateLimitResult(
        True, max_requests, max(max_requests - row.count, 0), row.window_start + window
    )


class RateLimiter:
    """
    FastAPI dependency enforcing a per-endpoint limit.

    Keys on the client IP, or on the user id when per_user is set and the
    caller is signed in. Sets X-RateLimit-* headers on the response and
    raises RateLimitExceededError (429) once the window is used up.
    """

    def __init__(self, endpoint: str, max_requests: int, window_seconds: int = 60, per_user: bool = False):
        self.endpoint = endpoint
        self.max_requests = max_requests
        self.window_ms = window_seconds * 1000
        self.per_user = per_user

    async def __call__(
        self,
        request: Request,
        response: Response,
        db: AsyncSession = Depends(get_db),
        user: Optional[User] = Depends(get_optional_user),
    ) -> Optional[RateLimitResult]:
        if not settings.RATE_LIMIT_ENABLED:
            return None

        if self.per_user and user is not None:
            identifier = f"user:{user.id}"
        else:
            identifier = get_client_ip(request)

        result = await check_rate_limit(
            db, identifier, self.endpoint, self.max_requests, self.window_ms
        )
        logger.log_rate_limit(identifier, self.endpoint, result.success, result.remaining)

        headers = result.headers()
        if not result.success:
            retry_after = max(int((result.reset - datetime.utcnow()).total_seconds()), 1)
            headers["Retry-After"] = str(retry_after)
            raise RateLimitExceededError(self.endpoint, headers=headers)

        for name, value in headers.items():
            response.headers[name] = value
        return result


enroll_rate_limit = RateLimiter("enroll", settings.RATE_LIMIT_ENROLL_MAX, 60)
create_task_rate_limit = RateLimiter("create-task", settings.RATE_LIMIT_CREATE_TASK_MAX, 60, per_user=True)
create_assignment_rate_limit = RateLimiter(
    "create-assignment", settings.RATE_LIMIT_CREATE_ASSIGNMENT_MAX, 60, per_user=True
)
