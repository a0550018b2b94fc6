"""
AI Provider Service

Streams chat completions from Cohere's language models.

The chat API only knows two conversational roles, so stored dialogue is
translated before each call:
- `assistant` becomes the provider's "model" role, `user` stays `user`
- `system` messages are merged into one preamble, prepended to the first
  remaining message, and dropped from the sequence
- everything but the last message is sent as history; the last message is
  the live prompt
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

import cohere

from app.config import COHERE_API_KEY, COHERE_MODEL, COHERE_TEMPERATURE
from app.exceptions import ProviderError, ValidationError

logger = logging.getLogger(__name__)

USER_ROLE = "user"
MODEL_ROLE = "model"

# Neutral turn roles -> Cohere chat_history roles
COHERE_ROLES = {
    USER_ROLE: "USER",
    MODEL_ROLE: "CHATBOT",
}

# Stream end reasons that mean the reply is not usable
COHERE_FAILED_FINISH_REASONS = {"ERROR", "ERROR_TOXIC", "ERROR_LIMIT"}


@dataclass
class ChatTurn:
    """One message in provider shape"""
    role: str  # "user" | "model"
    content: str


def translate_messages(messages: Sequence[Dict[str, str]]) -> Tuple[List[ChatTurn], str]:
    """
    Convert stored `{role, content}` messages into provider history plus prompt.

    Args:
        messages: Dialogue oldest first; roles are user, assistant or system

    Returns:
        (history, prompt) where history excludes the last message

    Raises:
        ValidationError: If no user/assistant message remains after dropping
            system messages
    """
    system_contents = [m["content"] for m in messages if m["role"] == "system"]
    system_prompt = "\n".join(system_contents) + "\n\n" if system_contents else ""

    turns = [
        ChatTurn(
            role=MODEL_ROLE if m["role"] == "assistant" else m["role"],
            content=m["content"],
        )
        for m in messages
        if m["role"] != "system"
    ]

    if not turns:
        raise ValidationError("Conversation has no message to respond to", code="EMPTY_PROMPT")

    if system_prompt:
        turns[0] = ChatTurn(role=turns[0].role, content=system_prompt + turns[0].content)

    return turns[:-1], turns[-1].content


class AIProviderService:
    """
    Streaming adapter around Cohere's chat endpoint.

    Responsibilities:
    - Translate stored messages into Cohere history + prompt
    - Relay non-empty text fragments as they arrive
    - Surface every vendor failure as ProviderError
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        model: str = COHERE_MODEL,
        temperature: float = COHERE_TEMPERATURE,
    ):
        self.model = model
        self.temperature = temperature
        self.client = client

        if self.client is None and COHERE_API_KEY:
            self.client = cohere.AsyncClient(api_key=COHERE_API_KEY)
            logger.info(f"Cohere provider initialized with model: {self.model}")
        elif self.client is None:
            logger.warning("Cohere provider disabled - COHERE_API_KEY not set")

    @staticmethod
    def _to_cohere_history(history: List[ChatTurn]) -> List[Dict[str, str]]:
        return [
            {"role": COHERE_ROLES[turn.role], "message": turn.content}
            for turn in history
        ]

    async def stream_chat(self, messages: Sequence[Dict[str, str]]) -> AsyncIterator[str]:
        """
        Stream the model's reply to a dialogue.

        Args:
            messages: Ordered `{role, content}` dicts

        Yields:
            Non-empty text fragments in the order the vendor emits them

        Raises:
            ValidationError: Nothing to prompt with
            ProviderError: Provider unavailable or the call failed mid-stream
        """
        history, prompt = translate_messages(messages)

        if self.client is None:
            raise ProviderError("COHERE_API_KEY is not configured")

        try:
            stream = self.client.chat_stream(
                model=self.model,
                message=prompt,
                chat_history=self._to_cohere_history(history),
                temperature=self.temperature,
            )
            async for event in stream:
                event_type = getattr(event, "event_type", None)

                if event_type == "text-generation":
                    text = getattr(event, "text", "")
                    if text:
                        yield text

                elif event_type == "stream-end":
                    finish_reason = getattr(event, "finish_reason", None)
                    if finish_reason in COHERE_FAILED_FINISH_REASONS:
                        raise ProviderError(f"Cohere API failed: stream ended with {finish_reason}")

        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Cohere API error: {str(e)}")
            raise ProviderError(f"Cohere API failed: {str(e) or 'Unknown error'}")


def get_ai_provider() -> AIProviderService:
    """Dependency for getting AIProviderService instance."""
    return AIProviderService()
