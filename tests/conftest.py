"""Shared test fixtures for pollbox."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from pollbox.api.auth import create_token
from pollbox.ledger.questions import QuestionBook
from pollbox.notify.dispatcher import NotificationDispatcher
from pollbox.storage.models import Base

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncSession

    from pollbox.notify.events import QuestionCreated
    from pollbox.storage.models import Question

JWT_SECRET = "test-secret-key"


class RecordingMailer:
    """Mailer double: remembers events, optionally blows up."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[QuestionCreated] = []

    def send_question_created(self, event: QuestionCreated) -> None:
        if self.fail:
            msg = "SMTP relay unreachable"
            raise OSError(msg)
        self.sent.append(event)


@pytest.fixture
async def db_factory() -> async_sessionmaker[AsyncSession]:  # type: ignore[misc]
    """In-memory SQLite session factory with FK enforcement."""
    engine = create_async_engine("sqlite+aiosqlite://")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(db_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:  # type: ignore[misc]
    async with db_factory() as session:
        yield session


@pytest.fixture
def make_question(db_factory: async_sessionmaker[AsyncSession]) -> Any:
    """Factory fixture: persist a question with answers, return it."""

    async def _make(
        title: str = "Best pizza topping?",
        answers: Sequence[str] = ("Mushroom", "Pineapple"),
        description: str = "",
    ) -> Question:
        async with db_factory() as session:
            question = await QuestionBook(session).create_question(
                title, description, None, [(a, "") for a in answers]
            )
            await session.commit()
            return question

    return _make


@pytest.fixture
def make_token() -> Any:
    def _make(
        sub: str = "auth0|alice",
        name: str = "Alice",
        email: str = "alice@example.com",
        **kwargs: Any,
    ) -> str:
        return create_token(sub, JWT_SECRET, name=name, email=email, **kwargs)

    return _make


@pytest.fixture
def auth_headers(make_token: Any) -> Any:
    def _make(**kwargs: Any) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(**kwargs)}"}

    return _make


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
async def api_app(  # type: ignore[misc]
    db_factory: async_sessionmaker[AsyncSession], mailer: RecordingMailer
) -> FastAPI:
    """The real application wired to the in-memory DB and a recording mailer."""
    from pollbox.api.app import create_app
    from pollbox.config.schema import PollboxConfig

    config = PollboxConfig.model_validate(
        {
            "auth": {"jwt_secret": JWT_SECRET},
            "api": {"rate_limit": 1000},
        }
    )
    app = create_app(config)
    notifier = NotificationDispatcher(mailer, maxsize=10)
    notifier.start()
    app.state.db_factory = db_factory
    app.state.notifier = notifier

    yield app

    await notifier.stop()


@pytest.fixture
async def client(api_app: FastAPI) -> AsyncClient:  # type: ignore[misc]
    transport = ASGITransport(app=api_app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
