"""Database configuration for the AI Chatbot backend."""
import logging
from typing import Generator

from sqlalchemy import event
from sqlmodel import create_engine, Session

from app.config import DATABASE_URL

logger = logging.getLogger(__name__)

# Check if we're using PostgreSQL or SQLite
if DATABASE_URL.startswith("postgresql"):
    logger.info("[DB CONFIG] Using PostgreSQL database")
else:
    logger.info(f"[DB CONFIG] Using SQLite database: {DATABASE_URL}")

# SQLite connections are shared across the threadpool FastAPI runs sync code in
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def enable_sqlite_foreign_keys(target_engine) -> None:
    """Turn on FK enforcement so conversation/message cascades hold on SQLite."""

    @event.listens_for(target_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if DATABASE_URL.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine)


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
