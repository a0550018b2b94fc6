"""
Conversation Service

CRUD operations for conversations and messages.

Every read and delete is scoped by owner; a conversation that belongs to
someone else looks exactly like one that does not exist.
"""

import logging
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.exceptions import NotFoundError, PersistenceError
from app.models.conversation import Conversation
from app.models.message import Message, MessageRole
from app.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 60


def parse_conversation_id(raw: str) -> UUID:
    """Malformed ids are reported as not found, same as foreign ones."""
    try:
        return UUID(str(raw))
    except ValueError:
        raise NotFoundError("Conversation not found")


class ConversationService:
    """Service for managing conversations and messages"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Conversation store commit failed: {str(e)}")
            raise PersistenceError("Failed to save conversation data")

    def create_conversation(self, user_id: str, title: str) -> Conversation:
        """Create new conversation"""
        now = utc_now()
        conversation = Conversation(
            id=uuid4(),
            title=title,
            user_id=user_id,
            created_at=now,
            updated_at=now
        )
        self.db.add(conversation)
        self._commit()
        self.db.refresh(conversation)
        return conversation

    def get_conversation(self, conversation_id: UUID, user_id: str) -> Optional[Conversation]:
        """Get conversation ensuring ownership"""
        statement = select(Conversation).where(
            Conversation.id == conversation_id,
            Conversation.user_id == user_id
        )
        return self.db.exec(statement).first()

    def require_conversation(self, conversation_id: UUID, user_id: str) -> Conversation:
        """Like get_conversation, but raises NotFoundError instead of returning None."""
        conversation = self.get_conversation(conversation_id, user_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    def add_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str
    ) -> Message:
        """Append an immutable message to a conversation"""
        message = Message(
            id=uuid4(),
            conversation_id=conversation_id,
            role=role.value,  # Use enum value (lowercase string)
            content=content,
            created_at=utc_now()
        )
        self.db.add(message)
        self._commit()
        self.db.refresh(message)
        return message

    def touch(self, conversation_id: UUID) -> Optional[Conversation]:
        """Bump the conversation's updated timestamp to now."""
        conversation = self.db.get(Conversation, conversation_id)
        if not conversation:
            return None
        conversation.updated_at = utc_now()
        self.db.add(conversation)
        self._commit()
        self.db.refresh(conversation)
        return conversation

    def get_messages(self, conversation_id: UUID) -> List[Message]:
        """Get all messages for a conversation, oldest first"""
        statement = select(Message).where(
            Message.conversation_id == conversation_id
        ).order_by(Message.created_at)

        return list(self.db.exec(statement).all())

    def get_user_conversations(self, user_id: str) -> List[Conversation]:
        """Get all conversations for a user, ordered by most recent"""
        statement = select(Conversation).where(
            Conversation.user_id == user_id
        ).order_by(Conversation.updated_at.desc())

        return list(self.db.exec(statement).all())

    def count_messages(self, conversation_id: UUID) -> int:
        statement = select(func.count()).select_from(Message).where(
            Message.conversation_id == conversation_id
        )
        return self.db.exec(statement).one()

    def last_message_preview(self, conversation_id: UUID) -> Optional[str]:
        """Content of the newest message, truncated for list views"""
        statement = select(Message).where(
            Message.conversation_id == conversation_id
        ).order_by(Message.created_at.desc()).limit(1)
        message = self.db.exec(statement).first()
        if not message:
            return None
        if len(message.content) > PREVIEW_LENGTH:
            return message.content[:PREVIEW_LENGTH] + "..."
        return message.content

    def delete_conversation(self, conversation_id: UUID, user_id: str) -> None:
        """Delete an owned conversation together with all of its messages"""
        conversation = self.require_conversation(conversation_id, user_id)
        self.db.delete(conversation)
        self._commit()
        logger.info(f"Deleted conversation {conversation_id} for user {user_id}")
