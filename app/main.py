"""Main FastAPI application for the AI Chatbot backend."""
import logging

from fastapi import FastAPI

from app.config import LOG_LEVEL
from app.db.init import init_db
from app.exceptions import register_exception_handlers
from app.middleware.cors import add_cors_middleware
from app.routers import auth_router, chat_router, users_router
from app.utils.logger import setup_logging

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="AI Chatbot API",
    description="Authentication, conversation history and streamed AI replies",
    version="1.0.0",
)

# Add CORS middleware
add_cors_middleware(app)

# Translate application errors into structured responses
register_exception_handlers(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
        logger.info("[SUCCESS] Database tables initialized successfully.")
    except Exception as e:
        logger.warning(f"[WARNING] Database initialization failed: {str(e)}")
        logger.warning("[WARNING] Server will continue but database operations may fail.")
        logger.warning("[WARNING] Please check your DATABASE_URL and network connection.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the AI Chatbot API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(auth_router, prefix="/auth")  # /auth/register, /auth/login, ...
app.include_router(chat_router, prefix="/chat")  # /chat/conversation, /chat/stream, ...
app.include_router(users_router, prefix="/users")  # /users/me


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
