"""Chat schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class ConversationCreate(BaseModel):
    """Create conversation request body."""
    title: str = Field(..., min_length=1, max_length=255)


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationListItem(ConversationResponse):
    """Conversation list item with message count and last message preview"""
    message_count: int = 0
    last_message: Optional[str] = None


class MessageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    role: str
    content: str
    created_at: datetime


class ConversationDetailResponse(ConversationResponse):
    messages: list[MessageItem]


class StreamRequest(BaseModel):
    """Body of POST /chat/stream; conversationId is checked by the route so a missing id is a 400."""
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: Optional[UUID] = Field(None, alias="conversationId")
    message: str = Field(..., min_length=1, max_length=10000)
