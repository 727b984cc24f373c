from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Text, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from educonnect.core.database import Base
from educonnect.core.types import GUID, generate_uuid


class ChatRoomType(str, enum.Enum):
    DIRECT = "DIRECT"
    GROUP = "GROUP"
    CLASS = "CLASS"


class MemberRole(str, enum.Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=True)
    type = Column(SQLEnum(ChatRoomType), nullable=False)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    members = relationship(
        "ChatRoomMember", back_populates="room", cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
    messages = relationship("ChatMessage", back_populates="room", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<ChatRoom {self.type} {self.name}>"


class ChatRoomMember(Base):
    __tablename__ = "chat_room_members"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_chat_member_room_user"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    room_id = Column(GUID, ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SQLEnum(MemberRole), default=MemberRole.MEMBER, nullable=False)
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    room = relationship("ChatRoom", back_populates="members")
    user = relationship("User", lazy="selectin")


class ChatMessage(Base):
    """Message in a room, or a direct message with only a receiver"""
    __tablename__ = "chat_messages"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    room_id = Column(GUID, ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=True, index=True)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    room = relationship("ChatRoom", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    receiver = relationship("User", foreign_keys=[receiver_id])

    def __repr__(self):
        return f"<ChatMessage {self.id} room={self.room_id}>"
