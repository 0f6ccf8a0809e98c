"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database (through aiosqlite)
with the full schema, and the API client routes its DB dependency to
it. Provider calls never leave the process: ``providers`` swaps the
registered factories for ``FakeProvider``.
"""

import os
from dataclasses import dataclass, field

from cryptography.fernet import Fernet

# Must be set before valet.core.config builds its settings
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("APP_ENV", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from valet.api.deps import get_db, get_session_factory
from valet.core.config import settings
from valet.db.models import Base
from valet.llm import registry
from valet.llm.types import AIProvider, ChatMessage, ChatOptions, ChatResult, Citation, Usage
from valet.main import app
from valet.repositories import api_keys as api_key_repository
from valet.repositories import sessions as session_repository
from valet.repositories import users as user_repository
from valet.tasks import pipeline_tasks

TEST_PASSWORD = "correct-horse-battery"


# ── Database ─────────────────────────────────
@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ── Fake LLM providers ───────────────────────
@dataclass
class ProviderScript:
    """What the fake providers answer, and what they were asked."""

    replies: list[str] = field(default_factory=list)
    error: Exception | None = None
    fail_on_call: int | None = None
    valid_key: bool = True
    calls: list[tuple[list[ChatMessage], ChatOptions]] = field(default_factory=list)
    api_keys: list[str] = field(default_factory=list)


class FakeProvider(AIProvider):
    id = "fake"

    def __init__(self, api_key: str, script: ProviderScript) -> None:
        self.script = script
        script.api_keys.append(api_key)

    async def chat(self, messages, options):
        self.script.calls.append((messages, options))
        call_number = len(self.script.calls)
        if self.script.error is not None and self.script.fail_on_call in (None, call_number):
            raise self.script.error
        content = self.script.replies.pop(0) if self.script.replies else f"reply {call_number}"
        return ChatResult(
            content=content,
            usage=Usage(input_tokens=100, output_tokens=50),
            citations=[Citation(url="https://example.com/source", title="Source")],
        )

    async def validate_key(self, api_key: str) -> bool:
        return self.script.valid_key

    def get_models(self):
        return []


@pytest.fixture
def providers(monkeypatch) -> ProviderScript:
    script = ProviderScript()
    for provider_id in ("anthropic", "openai"):
        monkeypatch.setitem(
            registry._provider_factories,
            provider_id,
            lambda api_key, script=script: FakeProvider(api_key, script),
        )
    return script


@pytest.fixture
def queued_runs(monkeypatch) -> list[str]:
    """Run ids handed to the worker queue instead of Celery."""
    queued: list[str] = []

    def fake_enqueue(run_id: str) -> str:
        queued.append(run_id)
        return f"task-{len(queued)}"

    monkeypatch.setattr(pipeline_tasks, "enqueue_pipeline_run", fake_enqueue)
    return queued


# ── Users & HTTP client ──────────────────────
@pytest.fixture
async def user(session_factory):
    async with session_factory() as session:
        user = await user_repository.create_user(
            session, email="ada@example.com", password=TEST_PASSWORD, full_name="Ada"
        )
        await session.commit()
    return user


@pytest.fixture
async def other_user(session_factory):
    async with session_factory() as session:
        user = await user_repository.create_user(
            session, email="grace@example.com", password=TEST_PASSWORD
        )
        await session.commit()
    return user


@pytest.fixture
async def anthropic_key(session_factory, user):
    async with session_factory() as session:
        await api_key_repository.upsert_key(
            session, user_id=user.id, provider="anthropic", api_key="sk-ant-test-key"
        )
        await session.commit()
    return "sk-ant-test-key"


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://testserver"
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def auth_client(client, session_factory, user):
    """``client`` signed in as ``user``."""
    async with session_factory() as session:
        token = await session_repository.create_session(session, user.id)
        await session.commit()
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    return client
