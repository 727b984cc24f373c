"""
Session Service - server-side login sessions (sessions table)

A session token is an opaque uuid4 stored in the `session_token` cookie.
Looking it up is the only way to learn who the caller is.
"""

from typing import Optional, List, Tuple
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_

from educonnect.core.security import generate_session_token, session_expiry
from educonnect.core.logging_config import logger
from educonnect.models.session import Session
from educonnect.models.user import User


class SessionService:
    """Create, resolve and revoke login sessions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_session(
        self,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Session:
        session = Session(
            session_token=generate_session_token(),
            user_id=user.id,
            expires=session_expiry(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        logger.debug(f"Created session {session.id} for user {user.id}")
        return session

    async def get_session(self, token: Optional[str]) -> Optional[Tuple[Session, User]]:
        """
        Resolve a token to (session, user).

        Returns None for a missing token, an unknown token, an expired
        session (which is deleted on the way) or an inactive user.
        """
        if not token:
            return None

        result = await self.db.execute(
            select(Session).where(Session.session_token == token)
        )
        session = result.scalar_one_or_none()
        if session is None:
            return None

        if session.is_expired():
            await self.db.delete(session)
            await self.db.commit()
            logger.debug(f"Deleted expired session {session.id}")
            return None

        user = session.user
        if user is None or not user.is_active:
            return None

        return session, user

    async def delete_session(self, token: str) -> bool:
        result = await self.db.execute(
            delete(Session).where(Session.session_token == token)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete_session_by_id(self, session_id: str) -> bool:
        result = await self.db.execute(
            delete(Session).where(Session.id == session_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def get_by_id(self, session_id: str) -> Optional[Session]:
        result = await self.db.execute(select(Session).where(Session.id == session_id))
        return result.scalar_one_or_none()

    async def delete_all_user_sessions(self, user_id: str, keep_token: Optional[str] = None) -> int:
        """Log a user out everywhere, optionally keeping the current session"""
        conditions = [Session.user_id == user_id]
        if keep_token:
            conditions.append(Session.session_token != keep_token)

        result = await self.db.execute(delete(Session).where(and_(*conditions)))
        await self.db.commit()

        logger.info(f"Revoked {result.rowcount} session(s) for user {user_id}")
        return result.rowcount

    async def list_user_sessions(self, user_id: str) -> List[Session]:
        """Unexpired sessions, newest first"""
        result = await self.db.execute(
            select(Session)
            .where(Session.user_id == user_id, Session.expires > datetime.utcnow())
            .order_by(Session.created_at.desc())
        )
        return list(result.scalars().all())
