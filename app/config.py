"""Runtime configuration for the AI Chatbot backend."""
import os
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Database
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./chatbot.db")

# Authentication
JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = "HS256"
JWT_ACCESS_TOKEN_EXPIRES = int(os.environ.get("JWT_ACCESS_TOKEN_EXPIRES", "3600"))  # seconds
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))
ACTIVATION_CODE_TTL_HOURS = int(os.environ.get("ACTIVATION_CODE_TTL_HOURS", "24"))

# Generative AI provider
COHERE_API_KEY = os.environ.get("COHERE_API_KEY")
COHERE_MODEL = os.environ.get("COHERE_MODEL", "command-r-plus")
COHERE_TEMPERATURE = float(os.environ.get("COHERE_TEMPERATURE", "0.7"))
