from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class AuditLog(Base):
    """Audit log for tracking admin actions"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action = Column(String(100), nullable=False)  # e.g. 'UPDATE', 'DELETE'
    entity = Column(String(50), nullable=False)  # e.g. 'User', 'Class'
    entity_id = Column(String(36), nullable=True)

    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User", foreign_keys=[user_id])

    def __repr__(self):
        return f"<AuditLog {self.action} {self.entity} by {self.user_id}>"
