from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime


class ChatRoomCreate(BaseModel):
    # Validated by the service so an unknown type gets the domain message
    type: str
    name: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list)
    class_id: Optional[str] = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    room_id: Optional[str] = None
    receiver_id: Optional[str] = None

    @model_validator(mode='after')
    def needs_target(self):
        if not self.content.strip():
            raise ValueError("Content is required")
        if not self.room_id and not self.receiver_id:
            raise ValueError("room_id or receiver_id is required")
        return self


class ChatMessageResponse(BaseModel):
    id: str
    room_id: Optional[str] = None
    sender_id: str
    receiver_id: Optional[str] = None
    content: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
