"""
Conversation Model

Stores conversation metadata for chat sessions between users and the AI assistant.
Each conversation belongs to one user and contains multiple messages.
"""

from datetime import datetime
from uuid import UUID, uuid4
from typing import List, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime

from app.utils.timestamps import utc_now

if TYPE_CHECKING:
    from .message import Message
    from .user import User


class Conversation(SQLModel, table=True):
    """
    Conversation metadata for chat sessions.

    Relationships:
    - Belongs to one User
    - Has many Messages (deleted with the conversation)

    `updated_at` is bumped each time a message round completes, which is
    what the conversation list is ordered by.
    """
    __tablename__ = "conversations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=255)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationships (lazy loaded to avoid circular imports)
    user: "User" = Relationship(back_populates="conversations")
    messages: List["Message"] = Relationship(
        back_populates="conversation",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "lazy": "select"}
    )
