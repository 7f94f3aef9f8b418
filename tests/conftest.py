"""Shared pytest fixtures configured to use SQLite in-memory for tests."""

import logging
import os
import uuid

# must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("NOTEHUB_SKIP_LIFESPAN_DB", "1")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from notehub.core.models.base import BaseModel
from notehub.core.notifications import (
    NotificationDeliveryError,
    NotificationDispatcher,
    NotificationSink,
    get_notification_dispatcher,
)
from notehub.core.schemas.identity import Viewer
from notehub.core.services.note_service import NoteService
from notehub.database import get_db_session
from notehub.main import app
from notehub.security.jwt import create_access_token

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class RecordingSink(NotificationSink):
    """Notification sink that keeps everything it is given."""

    def __init__(self):
        self.delivered = []
        self.fail_kinds = set()

    async def deliver(self, notification):
        if notification.kind in self.fail_kinds:
            raise NotificationDeliveryError(f"refusing {notification.kind.value}")
        self.delivered.append(notification)

    def kinds(self):
        return [n.kind for n in self.delivered]

    def for_kind(self, kind):
        return [n for n in self.delivered if n.kind == kind]


@pytest.fixture
async def test_engine():
    """Fresh SQLite in-memory engine per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # SQLite only enforces ON DELETE CASCADE with foreign keys switched on
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_maker):
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def dispatcher(sink):
    return NotificationDispatcher(sink)


@pytest.fixture
def note_service(test_session, dispatcher):
    return NoteService(test_session, dispatcher)


@pytest.fixture
def alice():
    return Viewer(id=uuid.uuid4(), username="alice")


@pytest.fixture
def bob():
    return Viewer(id=uuid.uuid4(), username="bob")


@pytest.fixture
def carol():
    return Viewer(id=uuid.uuid4(), username="carol")


@pytest.fixture
def auth_headers():
    """Bearer header factory, tokens shaped like the identity provider issues them."""

    def _headers(viewer: Viewer) -> dict:
        token = create_access_token({"sub": str(viewer.id), "username": viewer.username})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def test_app(session_maker, dispatcher):
    """App wired to the in-memory database and the recording sink."""

    # one session per request, like get_db_session
    async def _override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
