"""Initialize database tables."""
import logging

from sqlmodel import SQLModel

# Register table metadata
from app.models import User, Conversation, Message  # noqa: F401
from app.db.config import engine

logger = logging.getLogger(__name__)


def init_db(target_engine=None):
    """Create all tables in the database."""
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(target_engine or engine)
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    init_db()
    print("Database tables created successfully.")
