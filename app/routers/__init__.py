"""Routers package for the AI Chatbot API."""

from .auth import router as auth_router
from .chat import router as chat_router
from .users import router as users_router

__all__ = ["auth_router", "chat_router", "users_router"]
