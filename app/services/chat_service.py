"""
Chat Service

Runs one conversational turn: persist the user's message, replay the full
history to the AI provider, relay the reply fragment by fragment, and persist
the assembled assistant message once the provider finishes.

Turn Flow:
1. Verify the conversation belongs to the caller (NotFoundError otherwise)
2. Store the user message; it is kept even if generation fails
3. Load history, oldest first, including that message
4. Stream the provider reply, accumulating fragments
5. On completion store the assistant message and bump updated_at

If the provider fails, or the consumer stops reading, no assistant message
is written and the user message is left dangling.

Two concurrent turns on the same conversation are not serialized; their
history reads may interleave and the assistant replies land in whichever
order the provider finishes.
"""

import logging
from typing import AsyncIterator
from uuid import UUID

from app.models.message import MessageRole
from app.services.ai_provider import AIProviderService
from app.services.conversation_service import ConversationService

logger = logging.getLogger(__name__)


class ChatService:
    """Orchestrates streamed turns over a conversation store and an AI provider"""

    def __init__(self, conversations: ConversationService, provider: AIProviderService):
        self.conversations = conversations
        self.provider = provider

    def stream_turn(self, conversation_id: UUID, user_id: str, user_text: str) -> AsyncIterator[str]:
        """
        Start a turn and return the lazy fragment stream for it.

        The ownership check, the user-message write and the history read run
        here, before the stream is handed back, so a missing conversation
        surfaces as NotFoundError while the caller can still choose a status.

        Args:
            conversation_id: Target conversation
            user_id: Authenticated caller
            user_text: The user's message for this turn

        Returns:
            Async iterator of text fragments

        Raises:
            NotFoundError: Conversation missing or owned by another user
        """
        conversation = self.conversations.require_conversation(conversation_id, user_id)
        conversation_id = conversation.id

        self.conversations.add_message(conversation_id, MessageRole.USER, user_text)

        history = [
            {"role": message.role, "content": message.content}
            for message in self.conversations.get_messages(conversation_id)
        ]

        logger.info(
            f"Turn started on conversation {conversation_id} for user {user_id} "
            f"({len(history)} messages of history)"
        )
        return self._relay(conversation_id, history)

    async def _relay(self, conversation_id: UUID, history: list) -> AsyncIterator[str]:
        full_response = ""

        async for fragment in self.provider.stream_chat(history):
            full_response += fragment
            yield fragment

        self.conversations.add_message(conversation_id, MessageRole.ASSISTANT, full_response)
        self.conversations.touch(conversation_id)

        logger.info(
            f"Turn completed on conversation {conversation_id}: "
            f"{len(full_response)} characters persisted"
        )
