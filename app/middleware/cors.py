"""CORS configuration for the chat frontend."""
import logging

from fastapi.middleware.cors import CORSMiddleware

from app.config import ENVIRONMENT, FRONTEND_URL

logger = logging.getLogger(__name__)

# Base allowed origins for development
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Add production frontend URL if provided
if FRONTEND_URL and FRONTEND_URL not in ALLOWED_ORIGINS:
    ALLOWED_ORIGINS.append(FRONTEND_URL)

# The chat UI only sends JSON bodies and a bearer token
ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]


def add_cors_middleware(app):
    """Add CORS middleware to the FastAPI application."""
    origin_rules = {"allow_origins": ALLOWED_ORIGINS}
    if ENVIRONMENT == "production":
        # Preview deployments get their own *.vercel.app hostnames
        origin_rules["allow_origin_regex"] = r"https://.*\.vercel\.app"

    logger.info(f"[CORS] {ENVIRONMENT}: origins {ALLOWED_ORIGINS}, regex {origin_rules.get('allow_origin_regex')}")
    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        **origin_rules,
    )
