"""Fire-and-forget notification events.

Events are put on an RQ queue after the triggering state change has been
committed. A failure to enqueue is logged and dropped; it never affects the
state change that produced the event.
"""

import asyncio
import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from redis.exceptions import RedisError
from rq import Queue

from app.core.config import settings

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class NotificationEventType(str, Enum):
    APPLICATION_RECEIVED = "application_received"
    STATUS_CHANGED = "status_changed"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_REMINDER = "interview_reminder"


class NotificationEvent(BaseModel):
    """Signal consumed by the external delivery subsystem."""

    event_type: NotificationEventType
    application_id: int
    user_id: int
    job_id: int
    occurred_at: datetime = Field(default_factory=_now)
    payload: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def application_received(cls, application) -> "NotificationEvent":
        return cls(
            event_type=NotificationEventType.APPLICATION_RECEIVED,
            application_id=application.id,
            user_id=application.user_id,
            job_id=application.job_id,
            payload={"source": application.source},
        )

    @classmethod
    def status_changed(cls, application, previous_status) -> "NotificationEvent":
        return cls(
            event_type=NotificationEventType.STATUS_CHANGED,
            application_id=application.id,
            user_id=application.user_id,
            job_id=application.job_id,
            payload={
                "previous_status": str(getattr(previous_status, "value", previous_status)),
                "new_status": application.status.value,
            },
        )

    @classmethod
    def interview_event(
        cls, event_type: NotificationEventType, application, interview
    ) -> "NotificationEvent":
        return cls(
            event_type=event_type,
            application_id=application.id,
            user_id=application.user_id,
            job_id=application.job_id,
            payload={
                "interview_id": interview.id,
                "scheduled_at": interview.scheduled_at.isoformat(),
                "interview_type": interview.interview_type.value,
                "meeting_link": interview.meeting_link,
                "location": interview.location,
            },
        )


class NotificationPublisher:
    """Enqueues notification events for background delivery."""

    def __init__(self, queue: Queue | None = None, enabled: bool | None = None):
        self._queue = queue
        self.enabled = settings.notifications_enabled if enabled is None else enabled

    @property
    def queue(self) -> Queue:
        if self._queue is None:
            from app.tasks import notification_queue

            self._queue = notification_queue
        return self._queue

    async def publish(self, event: NotificationEvent) -> bool:
        """Enqueue ``event``; returns False when it was not handed off."""
        if not self.enabled:
            logger.debug(f"Notifications disabled, dropping {event.event_type.value}")
            return False

        try:
            await asyncio.to_thread(self._enqueue, event)
        except Exception as e:
            logger.warning(
                f"Failed to enqueue {event.event_type.value} for application "
                f"{event.application_id}: {e}"
            )
            return False

        logger.debug(
            f"Enqueued {event.event_type.value} for application {event.application_id}"
        )
        return True

    async def get_status(self) -> dict[str, Any]:
        """Delivery queue statistics, or the reason they are unavailable."""
        if not self.enabled:
            return {"enabled": False}

        from app.tasks import get_queue_status

        try:
            status = await asyncio.to_thread(get_queue_status, self.queue)
        except RedisError as e:
            logger.warning(f"Notification queue unavailable: {e}")
            return {"enabled": True, "error": str(e)}
        return {"enabled": True, **status}

    def _enqueue(self, event: NotificationEvent) -> None:
        from app.tasks import deliver_notification

        self.queue.enqueue(
            deliver_notification,
            event.model_dump(mode="json"),
            job_timeout="1m",
            description=f"{event.event_type.value} for application {event.application_id}",
        )


_publisher: NotificationPublisher | None = None


def get_publisher() -> NotificationPublisher:
    """Get or create the process-wide publisher."""
    global _publisher
    if _publisher is None:
        _publisher = NotificationPublisher()
    return _publisher
