"""
Chat API Router

Conversation CRUD and the streamed chat turn.

All endpoints require a bearer token; every conversation lookup is scoped to
the caller and answers 404 for conversations owned by anyone else.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from app.db.config import get_session as get_db
from app.exceptions import AppError, ValidationError
from app.middleware.auth import get_current_user, CurrentUser
from app.schemas.chat import (
    ConversationCreate,
    ConversationDetailResponse,
    ConversationListItem,
    ConversationResponse,
    MessageItem,
    StreamRequest,
)
from app.services.ai_provider import AIProviderService, get_ai_provider
from app.services.chat_service import ChatService
from app.services.conversation_service import ConversationService, parse_conversation_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])  # No prefix since main.py adds /chat prefix


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency for getting ConversationService instance."""
    return ConversationService(db)


def get_chat_service(
    conversations: ConversationService = Depends(get_conversation_service),
    provider: AIProviderService = Depends(get_ai_provider),
) -> ChatService:
    """Dependency for getting ChatService instance."""
    return ChatService(conversations, provider)


def sse_frame(payload: Dict[str, Any]) -> str:
    """Encode one Server-Sent Events data frame."""
    return f"data: {json.dumps(payload)}\n\n"


async def event_stream(fragments: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Wrap a turn's fragments as SSE frames.

    Headers are already sent once streaming starts, so failures are reported
    in-band as a final `{"error": ...}` frame; success ends with `{"done": true}`.
    """
    try:
        async for fragment in fragments:
            yield sse_frame({"content": fragment})
    except AppError as e:
        logger.warning(f"Chat stream failed: {e.code} {e.message}")
        yield sse_frame({"error": e.message})
        return
    except Exception as e:
        logger.error(f"Chat stream error: {str(e)}", exc_info=True)
        yield sse_frame({"error": "An error occurred processing your message"})
        return
    finally:
        # Client went away or the stream ended: stop pulling from the provider
        await fragments.aclose()

    yield sse_frame({"done": True})


@router.post("/conversation", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    request: ConversationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """Create a new conversation owned by the caller."""
    return service.create_conversation(current_user.user_id, request.title)


@router.get("/conversations", response_model=list[ConversationListItem])
async def get_conversations(
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """
    List the caller's conversations, most recently updated first,
    with message counts and last message preview
    """
    return [
        ConversationListItem(
            id=conv.id,
            title=conv.title,
            created_at=conv.created_at,
            updated_at=conv.updated_at,
            message_count=service.count_messages(conv.id),
            last_message=service.last_message_preview(conv.id),
        )
        for conv in service.get_user_conversations(current_user.user_id)
    ]


@router.get("/conversation/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """Get a conversation with its messages, oldest first."""
    conversation = service.require_conversation(
        parse_conversation_id(conversation_id),
        current_user.user_id
    )
    messages = service.get_messages(conversation.id)

    return ConversationDetailResponse(
        id=conversation.id,
        title=conversation.title,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        messages=[MessageItem.model_validate(msg) for msg in messages],
    )


@router.delete("/conversation/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: ConversationService = Depends(get_conversation_service),
):
    """Delete a conversation and all of its messages."""
    service.delete_conversation(parse_conversation_id(conversation_id), current_user.user_id)
    return {"message": "Conversation deleted successfully"}


@router.post("/stream")
async def stream_message(
    request: StreamRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """
    Stream the assistant's reply to a new user message (Server-Sent Events).

    Frames:
        data: {"content": "<fragment>"}   one per provider fragment
        data: {"done": true}              reply complete and saved
        data: {"error": "<message>"}      generation failed; user message kept
    """
    if request.conversation_id is None:
        raise ValidationError(
            "conversationId is required",
            details={"fields": {"conversationId": "Field required"}},
        )

    logger.info(f"Chat stream request from user {current_user.user_id}: {request.message[:50]}...")

    # Ownership check and user message write happen here, before any header is sent
    fragments = service.stream_turn(request.conversation_id, current_user.user_id, request.message)

    return StreamingResponse(
        event_stream(fragments),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
