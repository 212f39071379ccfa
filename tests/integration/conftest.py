"""
Integration test fixtures. Overrides get_db with an in-memory DB and get_llm
with a scripted fake provider.
"""
import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.utils.errors import UpstreamProviderError
from infra.llm.base import LLM


class FakeLLM(LLM):
    """Returns queued replies in order and records what it was asked."""

    def __init__(self):
        self.json_replies = []
        self.chat_reply = "Let's work through it together."
        self.prompts = []
        self.chats = []

    def queue_json(self, payload):
        self.json_replies.append(payload if isinstance(payload, str) else json.dumps(payload))

    async def generate_json(self, prompt, schema, *, timeout=None):
        self.prompts.append((prompt, schema))
        if not self.json_replies:
            raise UpstreamProviderError("The AI provider request failed.")
        return self.json_replies.pop(0)

    async def chat(self, messages, *, timeout=None):
        self.chats.append(list(messages))
        return self.chat_reply


@pytest.fixture
def session_factory():
    """In-memory engine shared across connections, plus its session factory."""
    from api.config import Base
    import api.models.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def api_client(override_get_db, fake_llm):
    """FastAPI TestClient with in-memory DB and fake LLM overrides."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.bootstrap import get_llm
    from api.config import get_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm] = lambda: fake_llm
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_course(session_factory, course_factory):
    """Persist a course document and return it."""
    from api.services.repositories import CourseRepository

    def _seed(**kwargs):
        course = course_factory(**kwargs)
        db = session_factory()
        try:
            CourseRepository(db).add(course)
            db.commit()
        finally:
            db.close()
        return course

    return _seed
