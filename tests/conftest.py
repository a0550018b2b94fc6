import os

# Cheap hashes and no real provider for the test run; set before app modules load
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("COHERE_API_KEY", None)

import asyncio
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.db.config import enable_sqlite_foreign_keys, get_session
from app.main import app
from app.services.ai_provider import AIProviderService, get_ai_provider
from app.services.mail_service import get_mail_service


def text_event(text):
    return SimpleNamespace(event_type="text-generation", text=text)


def end_event(finish_reason="COMPLETE"):
    return SimpleNamespace(event_type="stream-end", finish_reason=finish_reason)


class FakeCohereClient:
    """Stands in for cohere.AsyncClient; replays scripted stream events."""

    def __init__(self, events=None, error=None):
        self.events = events if events is not None else [
            text_event("Day 1: "), text_event("Lisbon. "), text_event("Day 2: Sintra."), end_event()
        ]
        self.error = error
        self.calls = []

    def chat_stream(self, **kwargs):
        self.calls.append(kwargs)
        return self._stream()

    async def _stream(self):
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send_activation_code(self, email, name, code, expires_at):
        self.sent.append({"email": email, "name": name, "code": code, "expires_at": expires_at})

    def last_code(self, email):
        return [m["code"] for m in self.sent if m["email"] == email][-1]


def collect(fragments):
    """Drain an async fragment iterator from sync test code."""
    async def _drain():
        return [fragment async for fragment in fragments]
    return asyncio.run(_drain())


def parse_sse(body):
    frames = []
    for chunk in body.split("\n\n"):
        if chunk.startswith("data: "):
            frames.append(json.loads(chunk[len("data: "):]))
    return frames


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def cohere_client():
    return FakeCohereClient()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(engine, cohere_client, mailer):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_ai_provider] = lambda: AIProviderService(client=cohere_client)
    app.dependency_overrides[get_mail_service] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register_and_login(client, mailer):
    """Create an activated account and return its bearer headers."""
    def _register_and_login(email="alice@example.com", password="pw123456", name="Alice"):
        response = client.post("/auth/register", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201
        user_id = response.json()["id"]

        response = client.post("/auth/verify-email", json={"user_id": user_id, "code": mailer.last_code(email)})
        assert response.status_code == 200

        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}, user_id

    return _register_and_login
