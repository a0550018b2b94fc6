"""SQLModel table models."""
from .user import User
from .conversation import Conversation
from .message import Message, MessageRole

__all__ = ["User", "Conversation", "Message", "MessageRole"]
