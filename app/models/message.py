"""
Message Model

Stores individual chat messages within conversations.
Messages are immutable once created.
"""

from datetime import datetime
from uuid import UUID, uuid4
from enum import Enum
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship, Column
from sqlalchemy import DateTime, Text, String

from app.utils.timestamps import utc_now

if TYPE_CHECKING:
    from .conversation import Conversation


class MessageRole(str, Enum):
    """Message sender role"""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(SQLModel, table=True):
    """
    Individual chat message.

    Relationships:
    - Belongs to one Conversation

    Ordering within a conversation is by `created_at` ascending; that order
    is the dialogue history handed to the AI provider.
    """
    __tablename__ = "messages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    conversation_id: UUID = Field(foreign_key="conversations.id", index=True, ondelete="CASCADE")
    role: str = Field(sa_column=Column(String(16), nullable=False))  # Store enum value as string
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)

    # Relationships (lazy loaded to avoid circular imports)
    conversation: "Conversation" = Relationship(
        back_populates="messages",
        sa_relationship_kwargs={"lazy": "select"}
    )
