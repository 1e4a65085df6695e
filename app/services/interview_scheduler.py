"""Interview scheduling and evaluation.

Interviews follow their own state machine, independent of the application
status::

    scheduled -> completed | cancelled | no_show
    scheduled -> (rescheduled) -> scheduled

Completed, cancelled and no-show interviews accept no further changes.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.models import (
    Application,
    ApplicationStatus,
    Interview,
    InterviewStatus,
    NoteSentiment,
    NoteType,
)
from app.models.application import _utc_now
from app.models.enums import can_transition
from app.schemas.interview import InterviewCreate, InterviewScores
from app.services.application_store import ApplicationStore
from app.services.note_ledger import NoteLedger
from app.services.notifications import (
    NotificationEvent,
    NotificationEventType,
    NotificationPublisher,
    get_publisher,
)
from app.services.transition_engine import TransitionEngine
from app.utils.validators import (
    as_naive_utc,
    validate_schedule_time,
    validate_scores,
)

logger = logging.getLogger(__name__)

INTERVIEWING_STATUSES = (ApplicationStatus.INTERVIEW, ApplicationStatus.OFFERED)


class InterviewScheduler:
    """Schedule, reschedule, cancel and evaluate interviews."""

    def __init__(
        self,
        store: ApplicationStore,
        transitions: TransitionEngine | None = None,
        notes: NoteLedger | None = None,
        publisher: NotificationPublisher | None = None,
        grace: timedelta | None = None,
    ):
        self.store = store
        self.publisher = publisher or get_publisher()
        self.transitions = transitions or TransitionEngine(store, publisher=self.publisher)
        self.notes = notes or NoteLedger(store)
        self.grace = (
            grace
            if grace is not None
            else timedelta(minutes=settings.reschedule_grace_minutes)
        )

    def _check_time(self, scheduled_at: datetime, now: datetime) -> datetime:
        scheduled_at = as_naive_utc(scheduled_at)
        check = validate_schedule_time(scheduled_at, now, self.grace)
        if not check.is_valid:
            raise ValidationError(check.error)
        for warning in check.warnings:
            logger.debug(warning)
        return scheduled_at

    @staticmethod
    def _ensure_open(interview: Interview, target: str) -> None:
        if interview.is_terminal:
            raise InvalidTransitionError(
                interview.status.value, target, "interview is already closed"
            )

    async def schedule(
        self, data: InterviewCreate, actor_id: int | None = None
    ) -> Interview:
        """Create an interview for an application.

        An application that can still move to ``interview`` is moved there in
        the same unit of work; a closed application cannot be interviewed.
        """
        now = _utc_now()
        scheduled_at = self._check_time(data.scheduled_at, now)

        async with self.store.transaction() as session:
            application = await self.store.get_application(
                session, data.application_id, lock=True
            )
            previous = await self._enter_interview_stage(session, application, actor_id)

            stage_id = data.stage_id
            if stage_id is not None:
                stage = await self.store.get_stage(session, stage_id)
                if stage.application_id != application.id:
                    raise NotFoundError(
                        f"Stage of application {application.id}", stage_id
                    )
            else:
                open_stage = await self.store.get_open_stage(session, application.id)
                stage_id = open_stage.id if open_stage is not None else None

            interview = Interview(
                application_id=application.id,
                stage_id=stage_id,
                interviewer_id=data.interviewer_id,
                scheduled_at=scheduled_at,
                interview_type=data.interview_type,
                meeting_link=data.meeting_link,
                location=data.location,
                status=InterviewStatus.SCHEDULED,
            )
            await self.store.add(session, interview)

        logger.info(
            f"Interview {interview.id} scheduled for application {application.id} "
            f"at {interview.scheduled_at.isoformat()}"
        )
        if previous is not None:
            await self.publisher.publish(
                NotificationEvent.status_changed(application, previous)
            )
        await self.publisher.publish(
            NotificationEvent.interview_event(
                NotificationEventType.INTERVIEW_SCHEDULED, application, interview
            )
        )
        return interview

    async def _enter_interview_stage(
        self, session: AsyncSession, application: Application, actor_id: int | None
    ) -> ApplicationStatus | None:
        status = ApplicationStatus(application.status)
        if status in INTERVIEWING_STATUSES:
            return None
        if status.is_terminal:
            raise InvalidTransitionError(
                status.value, "interview", "application is closed"
            )
        if can_transition(status, ApplicationStatus.INTERVIEW):
            return await self.transitions.apply_transition(
                session, application, ApplicationStatus.INTERVIEW, actor_id
            )
        return None

    async def reschedule(
        self,
        interview_id: int,
        scheduled_at: datetime,
        reason: str | None = None,
        actor_id: int | None = None,
        meeting_link: str | None = None,
        location: str | None = None,
    ) -> Interview:
        """Move an interview to a new time, keeping its identity."""
        now = _utc_now()
        scheduled_at = self._check_time(scheduled_at, now)

        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            self._ensure_open(interview, InterviewStatus.RESCHEDULED.value)
            application = await self.store.get_application(
                session, interview.application_id
            )

            previous_time = interview.scheduled_at
            interview.scheduled_at = scheduled_at
            if reason:
                interview.append_reschedule_reason(reason, now)
            if meeting_link is not None:
                interview.meeting_link = meeting_link
            if location is not None:
                interview.location = location
            interview.reminder_sent_at = None
            # rescheduled is transient; the interview is scheduled again
            interview.status = InterviewStatus.SCHEDULED
            await session.flush()

            author_id = actor_id or interview.interviewer_id
            if reason and author_id is not None:
                await self.notes.write_note(
                    session,
                    application_id=interview.application_id,
                    author_id=author_id,
                    note_text=f"Interview rescheduled: {reason}",
                    note_type=NoteType.REMINDER,
                    stage_id=interview.stage_id,
                )

        logger.info(
            f"Interview {interview_id} rescheduled from {previous_time.isoformat()} "
            f"to {scheduled_at.isoformat()}"
        )
        await self.publisher.publish(
            NotificationEvent.interview_event(
                NotificationEventType.INTERVIEW_SCHEDULED, application, interview
            )
        )
        return interview

    async def complete(
        self,
        interview_id: int,
        scores: InterviewScores | None = None,
        remarks: str | None = None,
        feedback_summary: str | None = None,
        actor_id: int | None = None,
    ) -> Interview:
        """Close an interview with its evaluation scores."""
        scores = scores or InterviewScores()
        check = validate_scores(scores.model_dump())
        if not check.is_valid:
            raise ValidationError(check.error)

        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            self._ensure_open(interview, InterviewStatus.COMPLETED.value)

            interview.status = InterviewStatus.COMPLETED
            interview.ended_at = _utc_now()
            interview.overall_score = scores.overall_score
            interview.technical_score = scores.technical_score
            interview.communication_score = scores.communication_score
            interview.personality_score = scores.personality_score
            interview.remarks = remarks
            interview.feedback_summary = feedback_summary
            await session.flush()

            author_id = actor_id or interview.interviewer_id
            if feedback_summary and author_id is not None:
                await self.notes.write_note(
                    session,
                    application_id=interview.application_id,
                    author_id=author_id,
                    note_text=feedback_summary,
                    note_type=NoteType.FEEDBACK,
                    stage_id=interview.stage_id,
                )

        logger.info(
            f"Interview {interview_id} completed, average score "
            f"{interview.calculate_average_score():.2f}"
        )
        return interview

    async def cancel(
        self, interview_id: int, reason: str | None = None, actor_id: int | None = None
    ) -> Interview:
        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            self._ensure_open(interview, InterviewStatus.CANCELLED.value)
            interview.status = InterviewStatus.CANCELLED
            await session.flush()

            author_id = actor_id or interview.interviewer_id
            if reason and author_id is not None:
                await self.notes.write_note(
                    session,
                    application_id=interview.application_id,
                    author_id=author_id,
                    note_text=f"Interview cancelled: {reason}",
                    note_type=NoteType.INTERNAL,
                    stage_id=interview.stage_id,
                )

        logger.info(f"Interview {interview_id} cancelled")
        return interview

    async def mark_no_show(
        self, interview_id: int, actor_id: int | None = None
    ) -> Interview:
        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            self._ensure_open(interview, InterviewStatus.NO_SHOW.value)
            interview.status = InterviewStatus.NO_SHOW
            await session.flush()

            author_id = actor_id or interview.interviewer_id
            if author_id is not None:
                await self.notes.write_note(
                    session,
                    application_id=interview.application_id,
                    author_id=author_id,
                    note_text="Candidate did not attend the interview",
                    note_type=NoteType.INTERNAL,
                    sentiment=NoteSentiment.NEGATIVE,
                    stage_id=interview.stage_id,
                )

        logger.info(f"Interview {interview_id} marked as no-show")
        return interview

    async def send_reminder(self, interview_id: int) -> Interview:
        """Emit a reminder for a scheduled interview and record when it was sent."""
        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            if interview.status != InterviewStatus.SCHEDULED:
                raise InvalidTransitionError(
                    interview.status.value,
                    "reminder",
                    "reminders are only sent for scheduled interviews",
                )
            application = await self.store.get_application(
                session, interview.application_id
            )
            interview.reminder_sent_at = _utc_now()
            await session.flush()

        await self.publisher.publish(
            NotificationEvent.interview_event(
                NotificationEventType.INTERVIEW_REMINDER, application, interview
            )
        )
        logger.info(f"Reminder sent for interview {interview_id}")
        return interview

    async def update_details(
        self,
        interview_id: int,
        interviewer_id: int | None = None,
        meeting_link: str | None = None,
        location: str | None = None,
    ) -> Interview:
        """Change logistics of an open interview; the time goes through reschedule."""
        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            self._ensure_open(interview, InterviewStatus.SCHEDULED.value)
            if interviewer_id is not None:
                interview.interviewer_id = interviewer_id
            if meeting_link is not None:
                interview.meeting_link = meeting_link
            if location is not None:
                interview.location = location
            await session.flush()
        return interview

    async def delete_interview(self, interview_id: int) -> None:
        async with self.store.transaction() as session:
            interview = await self.store.get_interview(session, interview_id, lock=True)
            await self.store.delete(session, interview)
        logger.info(f"Interview {interview_id} deleted")

    # Queries

    async def get_interview(self, interview_id: int) -> Interview:
        async with self.store.reader() as session:
            return await self.store.get_interview(session, interview_id)

    async def list_for_application(self, application_id: int) -> list[Interview]:
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            return await self.store.list_interviews(session, application_id)

    async def list_upcoming(
        self, days: int = 7, interviewer_id: int | None = None
    ) -> list[Interview]:
        """Scheduled interviews within the next ``days`` days."""
        now = _utc_now()
        async with self.store.reader() as session:
            return await self.store.list_interviews_between(
                session,
                now,
                now + timedelta(days=days),
                status=InterviewStatus.SCHEDULED,
                interviewer_id=interviewer_id,
            )

    async def list_in_range(self, start: datetime, end: datetime) -> list[Interview]:
        start, end = as_naive_utc(start), as_naive_utc(end)
        if end < start:
            raise ValidationError("Range end must not be before its start")
        async with self.store.reader() as session:
            return await self.store.list_interviews_between(session, start, end)

    async def due_for_reminder(
        self, lead: timedelta, now: datetime | None = None
    ) -> list[int]:
        """IDs of scheduled, not yet reminded interviews starting within ``lead``."""
        now = now or _utc_now()
        async with self.store.reader() as session:
            return await self.store.list_interviews_due_for_reminder(
                session, now, now + lead
            )
