from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class Session(Base):
    """Server-side login session referenced by the session cookie"""
    __tablename__ = "sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    session_token = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires = Column(DateTime, nullable=False)

    # Device/browser info
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="sessions", lazy="selectin")

    def is_expired(self, now: datetime = None) -> bool:
        """Check if session is expired"""
        return (now or datetime.utcnow()) > self.expires

    def __repr__(self):
        return f"<Session {self.id} user={self.user_id}>"
