"""Pytest configuration and fixtures."""

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

# Add the app directory to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["REMINDER_ENABLED"] = "false"


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database with every table created."""
    from app.core.storage import create_engine, init_models

    engine = create_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    from app.core.storage import create_session_factory

    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory):
    from app.services.application_store import ApplicationStore

    return ApplicationStore(session_factory, timeout_seconds=5)


@pytest_asyncio.fixture
async def file_store(tmp_path):
    """Store on a file database, so every session gets its own connection."""
    from app.core.storage import create_engine, create_session_factory, init_models
    from app.services.application_store import ApplicationStore

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'hiring.db'}")
    await init_models(engine)
    yield ApplicationStore(create_session_factory(engine), timeout_seconds=5)
    await engine.dispose()


@pytest.fixture
def publisher():
    """Notification publisher that records events instead of queueing them."""
    mock = MagicMock()
    mock.publish = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def transitions(store, publisher):
    from app.services.transition_engine import TransitionEngine

    return TransitionEngine(store, publisher=publisher)


@pytest.fixture
def stage_tracker(store):
    from app.services.stage_tracker import StageTracker

    return StageTracker(store)


@pytest.fixture
def note_ledger(store):
    from app.services.note_ledger import NoteLedger

    return NoteLedger(store)


@pytest.fixture
def interviews(store, transitions, note_ledger, publisher):
    from app.services.interview_scheduler import InterviewScheduler

    return InterviewScheduler(
        store, transitions=transitions, notes=note_ledger, publisher=publisher
    )


@pytest.fixture
def documents(store):
    from app.services.document_service import DocumentService

    return DocumentService(store)


@pytest.fixture
def analytics(store):
    from app.services.analytics_engine import AnalyticsEngine

    return AnalyticsEngine(store)


@pytest.fixture
def submit(transitions):
    """Factory submitting an application with sensible defaults."""
    from app.schemas.application import ApplicationCreate

    async def _submit(job_id: int = 1, user_id: int = 1, **fields):
        return await transitions.submit(
            ApplicationCreate(job_id=job_id, user_id=user_id, **fields)
        )

    return _submit


@pytest.fixture
def advance(transitions):
    """Walk an application forward along the funnel to ``target``."""
    from app.models.enums import FUNNEL_ORDER

    async def _advance(application_id: int, target, actor_id: int = 100):
        current = (await transitions.get_application(application_id)).status
        for status in FUNNEL_ORDER[FUNNEL_ORDER.index(current) + 1 :]:
            await transitions.transition(application_id, status, actor_id)
            if status == target:
                break

    return _advance


@pytest_asyncio.fixture
async def client(store, publisher):
    """HTTP client bound to the app with the test database."""
    from httpx import ASGITransport, AsyncClient

    from app.main import app
    from app.services.dependencies import get_store
    from app.services.notifications import get_publisher

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_publisher] = lambda: publisher

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client

    app.dependency_overrides.clear()
