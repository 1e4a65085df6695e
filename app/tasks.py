"""Background tasks for hiring notifications.

Notification events produced by the lifecycle engine are delivered here, in an
RQ (Redis Queue) worker process, so that a slow or failing delivery endpoint
never holds up a request.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from redis import Redis
from rq import Queue, Worker

from app.core.config import settings

# Redis connection and queue setup
redis_conn = Redis.from_url(settings.redis_url)
notification_queue = Queue(settings.notification_queue, connection=redis_conn)

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 10.0


def _now_iso() -> str:
    return datetime.now(UTC).replace(tzinfo=None).isoformat()


def deliver_notification(event: dict[str, Any]) -> dict[str, Any]:
    """Deliver one notification event.

    Posts the event to the configured webhook. Without a webhook the event is
    only logged. HTTP failures are raised so that RQ records the job as failed
    and it can be requeued with ``retry_failed_jobs``.

    Args:
        event: JSON form of a ``NotificationEvent``

    Returns:
        Delivery summary stored as the job result
    """
    event_type = event.get("event_type", "unknown")
    application_id = event.get("application_id")

    if not settings.notification_webhook_url:
        logger.info(
            f"Notification {event_type} for application {application_id} "
            f"(no webhook configured)"
        )
        return {"status": "logged", "event_type": event_type, "timestamp": _now_iso()}

    response = httpx.post(
        settings.notification_webhook_url,
        json=event,
        timeout=WEBHOOK_TIMEOUT_SECONDS,
    )
    response.raise_for_status()

    logger.info(
        f"Delivered {event_type} for application {application_id} "
        f"(HTTP {response.status_code})"
    )
    return {
        "status": "delivered",
        "event_type": event_type,
        "http_status": response.status_code,
        "timestamp": _now_iso(),
    }


# Monitoring and Management Functions
def get_queue_status(queue: Queue | None = None) -> dict[str, Any]:
    """Get current queue status and statistics."""
    if queue is None:
        queue = notification_queue
    return {
        "queue_name": queue.name,
        "pending_jobs": len(queue),
        "failed_jobs": len(queue.failed_job_registry),
        "workers": len(Worker.all(queue=queue)),
        "timestamp": _now_iso(),
    }


def retry_failed_jobs() -> int:
    """Requeue every failed delivery.

    Returns:
        Number of jobs requeued for retry
    """
    failed_registry = notification_queue.failed_job_registry
    retry_count = 0
    for job_id in failed_registry.get_job_ids():
        try:
            failed_registry.requeue(job_id)
            retry_count += 1
        except Exception as e:
            logger.error(f"Failed to retry job {job_id}: {e!s}")

    logger.info(f"Requeued {retry_count} failed notification jobs")
    return retry_count


# Worker Configuration
def start_worker(burst: bool = False):
    """Start an RQ worker for notification delivery.

    Args:
        burst: If True, worker will exit when queue is empty
    """
    logger.info("Starting notification worker")

    worker = Worker(
        [notification_queue],
        connection=redis_conn,
        name="hiring-notification-worker",
    )

    worker.work(burst=burst)


if __name__ == "__main__":
    import sys

    start_worker(burst="--burst" in sys.argv)
