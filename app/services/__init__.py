"""Application services."""

from app.services.analytics_engine import AnalyticsEngine
from app.services.application_store import ApplicationStore
from app.services.document_service import DocumentService
from app.services.interview_scheduler import InterviewScheduler
from app.services.note_ledger import NoteLedger
from app.services.notifications import (
    NotificationEvent,
    NotificationEventType,
    NotificationPublisher,
)
from app.services.stage_tracker import StageTracker
from app.services.transition_engine import TransitionEngine

__all__ = [
    "AnalyticsEngine",
    "ApplicationStore",
    "DocumentService",
    "InterviewScheduler",
    "NoteLedger",
    "NotificationEvent",
    "NotificationEventType",
    "NotificationPublisher",
    "StageTracker",
    "TransitionEngine",
]
