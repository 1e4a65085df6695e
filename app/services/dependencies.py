"""FastAPI dependencies for the lifecycle engines."""

from fastapi import Depends, Header

from app.core.exceptions import unauthorized_exception
from app.services.analytics_engine import AnalyticsEngine
from app.services.application_store import ApplicationStore
from app.services.document_service import DocumentService
from app.services.interview_scheduler import InterviewScheduler
from app.services.note_ledger import NoteLedger
from app.services.notifications import NotificationPublisher, get_publisher
from app.services.stage_tracker import StageTracker
from app.services.transition_engine import TransitionEngine


def get_store() -> ApplicationStore:
    """Store bound to the application's session factory."""
    return ApplicationStore()


def publisher_dep(
    publisher: NotificationPublisher = Depends(get_publisher),
) -> NotificationPublisher:
    return publisher


def get_actor_id(x_user_id: int | None = Header(default=None)) -> int | None:
    """Acting user, as asserted by the authenticating proxy."""
    return x_user_id


def require_actor(actor_id: int | None = Depends(get_actor_id)) -> int:
    """Acting user for operations that need one."""
    if actor_id is None:
        raise unauthorized_exception("X-User-ID header is required")
    return actor_id


def get_stage_tracker(store: ApplicationStore = Depends(get_store)) -> StageTracker:
    return StageTracker(store)


def get_transition_engine(
    store: ApplicationStore = Depends(get_store),
    publisher: NotificationPublisher = Depends(publisher_dep),
) -> TransitionEngine:
    return TransitionEngine(store, publisher=publisher)


def get_note_ledger(store: ApplicationStore = Depends(get_store)) -> NoteLedger:
    return NoteLedger(store)


def get_interview_scheduler(
    store: ApplicationStore = Depends(get_store),
    transitions: TransitionEngine = Depends(get_transition_engine),
    notes: NoteLedger = Depends(get_note_ledger),
    publisher: NotificationPublisher = Depends(publisher_dep),
) -> InterviewScheduler:
    return InterviewScheduler(
        store, transitions=transitions, notes=notes, publisher=publisher
    )


def get_document_service(store: ApplicationStore = Depends(get_store)) -> DocumentService:
    return DocumentService(store)


def get_analytics_engine(store: ApplicationStore = Depends(get_store)) -> AnalyticsEngine:
    return AnalyticsEngine(store)
