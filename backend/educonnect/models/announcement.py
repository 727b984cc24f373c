from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class AnnouncementPriority(str, enum.Enum):
    NORMAL = "NORMAL"
    URGENT = "URGENT"


class Announcement(Base):
    """Class-wide or global (admin) announcement"""
    __tablename__ = "announcements"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=True, index=True)
    author_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    priority = Column(SQLEnum(AnnouncementPriority), default=AnnouncementPriority.NORMAL, nullable=False)
    is_global = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classroom = relationship("Classroom", back_populates="announcements", lazy="selectin")
    author = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<Announcement {self.title}>"
