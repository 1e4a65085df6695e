"""Periodic interview reminders."""

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import ApplicationError
from app.services.application_store import ApplicationStore
from app.services.interview_scheduler import InterviewScheduler

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "interview-reminders"


class ReminderService:
    """Sends reminders for interviews starting within the lead window."""

    def __init__(self, interviews: InterviewScheduler | None = None):
        self._interviews = interviews
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def interviews(self) -> InterviewScheduler:
        if self._interviews is None:
            self._interviews = InterviewScheduler(ApplicationStore())
        return self._interviews

    @property
    def scheduler(self) -> AsyncIOScheduler | None:
        return self._scheduler

    async def start(self):
        """Start the periodic reminder job."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Reminder scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=settings.reminder_timezone)
        self._scheduler.add_job(
            self.send_due_reminders,
            trigger=IntervalTrigger(minutes=settings.reminder_interval_minutes),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            f"Reminder scheduler started: every {settings.reminder_interval_minutes} min, "
            f"lead {settings.reminder_lead_hours}h"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Reminder scheduler stopped")

    async def send_due_reminders(self, now: datetime | None = None) -> int:
        """Remind every interview due within the lead window; returns the count sent."""
        lead = timedelta(hours=settings.reminder_lead_hours)
        try:
            due = await self.interviews.due_for_reminder(lead, now=now)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load interviews due for reminder: {e}")
            return 0

        sent = 0
        for interview_id in due:
            try:
                await self.interviews.send_reminder(interview_id)
                sent += 1
            except (ApplicationError, SQLAlchemyError) as e:
                logger.warning(f"Reminder for interview {interview_id} skipped: {e}")

        if due:
            logger.info(f"Sent {sent}/{len(due)} interview reminders")
        return sent

    def get_status(self) -> dict:
        running = self._scheduler is not None and self._scheduler.running
        next_run = None
        if running:
            job = self._scheduler.get_job(REMINDER_JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()
        return {"running": running, "next_run": next_run}


reminder_service = ReminderService()
