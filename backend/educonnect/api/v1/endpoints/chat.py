"""
Chat API

- GET  /chat/rooms                  - rooms the caller belongs to, with unread counts
- POST /chat/rooms                  - create a DIRECT, GROUP or CLASS room (existing one is reused)
- GET  /chat/rooms/{id}/messages    - history page (cursor, limit), marks messages read
- POST /chat/messages               - send to a room or directly to a user
- GET  /chat/direct/{user_id}       - room-less conversation with another user
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from educonnect.core.database import get_db
from educonnect.models.user import User
from educonnect.modules.auth.dependencies import get_current_user
from educonnect.schemas.chat import ChatRoomCreate, MessageCreate
from educonnect.services.chat_service import ChatService, DEFAULT_MESSAGE_LIMIT, serialize_message
from educonnect.utils.responses import success_response

router = APIRouter()


@router.get("/rooms")
async def list_rooms(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ChatService(db).list_rooms(current_user))


@router.post("/rooms")
async def create_room(
    room_data: ChatRoomCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ChatService(db)
    room, existing = await service.create_room(current_user, room_data)
    response.status_code = status.HTTP_200_OK if existing else status.HTTP_201_CREATED

    data = service.serialize_room(room, current_user.id)
    data["existing"] = existing
    return success_response(data, "Room already exists" if existing else "Room created")


@router.get("/rooms/{room_id}/messages")
async def list_room_messages(
    room_id: str,
    cursor: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_MESSAGE_LIMIT, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ChatService(db).list_messages(current_user, room_id, cursor, limit))


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    message = await ChatService(db).send_message(current_user, message_data)
    return success_response(serialize_message(message), "Message sent")


@router.get("/direct/{user_id}")
async def direct_messages(
    user_id: str,
    limit: int = Query(DEFAULT_MESSAGE_LIMIT, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return success_response(await ChatService(db).direct_messages(current_user, user_id, limit))
