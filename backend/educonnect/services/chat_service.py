"""
Chat Service Layer
Rooms (direct, group, class), room messages and direct messages
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.exceptions import AuthorizationError, ResourceNotFoundError, UserNotFoundError, ValidationError
from educonnect.core.logging_config import logger
from educonnect.models.chat import ChatRoom, ChatRoomMember, ChatMessage, ChatRoomType, MemberRole
from educonnect.models.user import User
from educonnect.schemas.chat import ChatRoomCreate, MessageCreate, ChatMessageResponse
from educonnect.services import access


NOT_A_MEMBER = "Not a member of this room"
DEFAULT_MESSAGE_LIMIT = 50


def serialize_message(message: ChatMessage) -> Dict[str, Any]:
    data = ChatMessageResponse.model_validate(message).model_dump()
    sender = message.sender
    data["sender"] = {"id": sender.id, "name": sender.name, "image": sender.image} if sender else None
    return data


def serialize_member(member: ChatRoomMember) -> Dict[str, Any]:
    user = member.user
    return {
        "user_id": member.user_id,
        "name": user.name if user else None,
        "image": user.image if user else None,
        "role": member.role,
    }


def room_display_name(room: ChatRoom, viewer_id: str) -> Optional[str]:
    if room.name or room.type != ChatRoomType.DIRECT:
        return room.name
    other = next((m for m in room.members if m.user_id != viewer_id), None)
    return other.user.name if other and other.user else None


class ChatService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_room(self, room_id: str, reload: bool = False) -> ChatRoom:
        query = select(ChatRoom).where(ChatRoom.id == room_id)
        if reload:
            query = query.execution_options(populate_existing=True)
        room = (await self.db.execute(query)).scalar_one_or_none()
        if room is None:
            raise ResourceNotFoundError("Chat room", room_id)
        return room

    async def _require_member(self, user: User, room_id: str) -> ChatRoom:
        room = await self._get_room(room_id)
        if not any(m.user_id == user.id for m in room.members):
            raise AuthorizationError(NOT_A_MEMBER)
        return room

    def serialize_room(self, room: ChatRoom, viewer_id: str, last_message=None, unread: int = 0) -> Dict[str, Any]:
        return {
            "id": room.id,
            "name": room_display_name(room, viewer_id),
            "type": room.type,
            "class_id": room.class_id,
            "members": [serialize_member(m) for m in room.members],
            "last_message": serialize_message(last_message) if last_message else None,
            "unread_count": unread,
            "created_at": room.created_at,
            "updated_at": room.updated_at,
        }

    # =====================================================
    # ROOMS
    # =====================================================

    async def list_rooms(self, user: User) -> List[Dict[str, Any]]:
        rooms = list((await self.db.execute(
            select(ChatRoom)
            .join(ChatRoomMember, ChatRoomMember.room_id == ChatRoom.id)
            .where(ChatRoomMember.user_id == user.id)
            .order_by(ChatRoom.updated_at.desc())
        )).scalars().unique().all())
        if not rooms:
            return []

        room_ids = [r.id for r in rooms]
        unread = dict((await self.db.execute(
            select(ChatMessage.room_id, func.count())
            .where(
                ChatMessage.room_id.in_(room_ids),
                ChatMessage.sender_id != user.id,
                ChatMessage.read == False,  # noqa: E712
            )
            .group_by(ChatMessage.room_id)
        )).all())

        latest = (
            select(ChatMessage.room_id, func.max(ChatMessage.created_at).label("latest"))
            .where(ChatMessage.room_id.in_(room_ids))
            .group_by(ChatMessage.room_id)
            .subquery()
        )
        last_messages = {
            m.room_id: m
            for m in (await self.db.execute(
                select(ChatMessage).join(
                    latest,
                    and_(ChatMessage.room_id == latest.c.room_id, ChatMessage.created_at == latest.c.latest),
                )
            )).scalars().all()
        }

        return [
            self.serialize_room(room, user.id, last_messages.get(room.id), unread.get(room.id, 0))
            for room in rooms
        ]

    async def create_room(self, user: User, data: ChatRoomCreate) -> tuple:
        """
        Create a room, or return the existing one for a DIRECT pair or a class.

        Returns (room, existing).
        """
        try:
            room_type = ChatRoomType(data.type.upper())
        except ValueError:
            raise ValidationError("Invalid room type", field="type")

        if room_type == ChatRoomType.DIRECT:
            return await self._create_direct(user, data)
        if room_type == ChatRoomType.GROUP:
            return await self._create_group(user, data)
        return await self._create_class_room(user, data)

    async def _create_direct(self, user: User, data: ChatRoomCreate) -> tuple:
        others = [m for m in dict.fromkeys(data.member_ids) if m != user.id]
        if len(others) != 1:
            raise ValidationError("Direct chat requires exactly one other member", field="member_ids")
        other_id = others[0]
        if await self.db.get(User, other_id) is None:
            raise UserNotFoundError(other_id)

        mine = select(ChatRoomMember.room_id).where(ChatRoomMember.user_id == user.id)
        theirs = select(ChatRoomMember.room_id).where(ChatRoomMember.user_id == other_id)
        existing = (await self.db.execute(
            select(ChatRoom)
            .where(ChatRoom.type == ChatRoomType.DIRECT, ChatRoom.id.in_(mine), ChatRoom.id.in_(theirs))
            .limit(1)
        )).scalar_one_or_none()
        if existing is not None:
            return existing, True

        room = ChatRoom(type=ChatRoomType.DIRECT, name=data.name, members=[
            ChatRoomMember(user_id=user.id, role=MemberRole.MEMBER),
            ChatRoomMember(user_id=other_id, role=MemberRole.MEMBER),
        ])
        return await self._save(room), False

    async def _create_group(self, user: User, data: ChatRoomCreate) -> tuple:
        if not data.name or not data.name.strip():
            raise ValidationError("Group name is required", field="name")
        others = [m for m in dict.fromkeys(data.member_ids) if m != user.id]
        if not others:
            raise ValidationError("Group chat requires at least one member", field="member_ids")

        found = set((await self.db.execute(select(User.id).where(User.id.in_(others)))).scalars().all())
        missing = [m for m in others if m not in found]
        if missing:
            raise UserNotFoundError(missing[0])

        members = [ChatRoomMember(user_id=user.id, role=MemberRole.ADMIN)]
        members += [ChatRoomMember(user_id=m, role=MemberRole.MEMBER) for m in others]
        room = ChatRoom(type=ChatRoomType.GROUP, name=data.name.strip(), members=members)
        return await self._save(room), False

    async def _create_class_room(self, user: User, data: ChatRoomCreate) -> tuple:
        if not data.class_id:
            raise ValidationError("class_id is required for class chat", field="class_id")
        classroom = await access.get_owned_class(self.db, user, data.class_id)

        existing = (await self.db.execute(
            select(ChatRoom).where(ChatRoom.type == ChatRoomType.CLASS, ChatRoom.class_id == classroom.id)
        )).scalar_one_or_none()
        if existing is not None:
            return existing, True

        teacher_user_id = classroom.teacher.user_id if classroom.teacher else user.id
        members = [ChatRoomMember(user_id=teacher_user_id, role=MemberRole.ADMIN)]
        for student_user_id in await access.approved_student_user_ids(self.db, classroom.id):
            if student_user_id != teacher_user_id:
                members.append(ChatRoomMember(user_id=student_user_id, role=MemberRole.MEMBER))
        if user.id not in {m.user_id for m in members}:
            members.append(ChatRoomMember(user_id=user.id, role=MemberRole.ADMIN))

        room = ChatRoom(type=ChatRoomType.CLASS, name=data.name or classroom.name, class_id=classroom.id, members=members)
        return await self._save(room), False

    async def _save(self, room: ChatRoom) -> ChatRoom:
        self.db.add(room)
        await self.db.commit()
        logger.info(f"Chat room {room.id} ({room.type.value}) created with {len(room.members)} member(s)")
        return await self._get_room(room.id, reload=True)

    # =====================================================
    # MESSAGES
    # =====================================================

    async def list_messages(
        self, user: User, room_id: str, cursor: Optional[str] = None, limit: int = DEFAULT_MESSAGE_LIMIT
    ) -> Dict[str, Any]:
        """
        One page of room history, oldest first.

        `cursor` is the id of the oldest message already seen; the page holds
        the messages sent before it. `next_cursor` is None on the last page.
        """
        await self._require_member(user, room_id)
        limit = max(1, min(limit, 100))

        query = select(ChatMessage).where(ChatMessage.room_id == room_id)
        if cursor:
            anchor = await self.db.get(ChatMessage, cursor)
            if anchor is None or anchor.room_id != room_id:
                raise ValidationError("Invalid cursor", field="cursor")
            query = query.where(or_(
                ChatMessage.created_at < anchor.created_at,
                and_(ChatMessage.created_at == anchor.created_at, ChatMessage.id < anchor.id),
            ))

        messages = list((await self.db.execute(
            query.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()).limit(limit)
        )).scalars().all())
        messages.reverse()

        await self.db.execute(
            update(ChatMessage)
            .where(
                ChatMessage.room_id == room_id,
                ChatMessage.sender_id != user.id,
                ChatMessage.read == False,  # noqa: E712
            )
            .values(read=True)
        )
        await self.db.commit()

        return {
            "messages": [serialize_message(m) for m in messages],
            "next_cursor": messages[0].id if len(messages) == limit else None,
        }

    async def send_message(self, user: User, data: MessageCreate) -> ChatMessage:
        now = datetime.utcnow()
        if data.room_id:
            room = await self._require_member(user, data.room_id)
            room.updated_at = now
            message = ChatMessage(room_id=room.id, sender_id=user.id, content=data.content.strip(), created_at=now)
        else:
            if await self.db.get(User, data.receiver_id) is None:
                raise UserNotFoundError(data.receiver_id)
            message = ChatMessage(
                sender_id=user.id, receiver_id=data.receiver_id, content=data.content.strip(), created_at=now
            )

        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def direct_messages(self, user: User, other_user_id: str, limit: int = DEFAULT_MESSAGE_LIMIT) -> List[Dict[str, Any]]:
        """Room-less messages exchanged with another user, oldest first"""
        messages = list((await self.db.execute(
            select(ChatMessage)
            .where(
                ChatMessage.room_id.is_(None),
                or_(
                    and_(ChatMessage.sender_id == user.id, ChatMessage.receiver_id == other_user_id),
                    and_(ChatMessage.sender_id == other_user_id, ChatMessage.receiver_id == user.id),
                ),
            )
            .order_by(ChatMessage.created_at.desc())
            .limit(max(1, min(limit, 100)))
        )).scalars().all())
        messages.reverse()

        await self.db.execute(
            update(ChatMessage)
            .where(
                ChatMessage.room_id.is_(None),
                ChatMessage.sender_id == other_user_id,
                ChatMessage.receiver_id == user.id,
                ChatMessage.read == False,  # noqa: E712
            )
            .values(read=True)
        )
        await self.db.commit()
        return [serialize_message(m) for m in messages]
