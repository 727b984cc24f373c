from sqlalchemy import Column, String, DateTime, Integer, UniqueConstraint
from datetime import datetime

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class RateLimit(Base):
    """Fixed-window request counter per (identifier, endpoint)"""
    __tablename__ = "rate_limits"
    __table_args__ = (
        UniqueConstraint("identifier", "endpoint", name="uq_rate_limit_identifier_endpoint"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    identifier = Column(String(255), nullable=False)
    endpoint = Column(String(100), nullable=False)
    count = Column(Integer, default=1, nullable=False)
    window_start = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<RateLimit {self.endpoint} [{self.identifier}] {self.count}>"
