"""Read-only hiring analytics.

All figures are computed from committed state. Queries may run concurrently
with transitions, so a snapshot taken mid-transition can be off by one
application.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta

from app.core.exceptions import ValidationError
from app.models import (
    Application,
    ApplicationDocument,
    ApplicationNote,
    ApplicationStatus,
    InterviewStatus,
)
from app.models.application import _utc_now
from app.models.enums import FUNNEL_ORDER
from app.schemas.analytics import (
    ApplicationStats,
    ApplicationTimeline,
    ApplicationTrend,
    ConversionFunnel,
    FunnelStage,
    JobStatusBreakdown,
    SourceStats,
    StageProgress,
    StageTimeStats,
    TimelineEvent,
    TrendPoint,
    UserApplicationStats,
)
from app.services.application_store import ApplicationStore

logger = logging.getLogger(__name__)

MAX_TREND_DAYS = 366
MAX_TOP_APPLICANTS = 100


def _percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, 2)


class AnalyticsEngine:
    """Funnels, stage durations, trends and rankings over applications."""

    def __init__(self, store: ApplicationStore):
        self.store = store

    async def conversion_funnel(self, job_id: int) -> ConversionFunnel:
        """Applications that reached each funnel stage of a job.

        An application counts for a stage when its current status or any
        stage in its history is at or beyond that stage, so a candidate
        rejected after the interview still counts for applied through
        interview. Counts, and with them the cumulative conversion rates,
        never increase along the funnel.
        """
        async with self.store.reader() as session:
            statuses = await self.store.application_statuses(session, job_id)
            stage_rows = await self.store.stage_names_for_job(session, job_id)

        furthest: dict[int, int] = {application_id: 0 for application_id, _ in statuses}
        for application_id, name in [*statuses, *stage_rows]:
            rank = ApplicationStatus(name).funnel_rank
            if rank is not None and application_id in furthest:
                furthest[application_id] = max(furthest[application_id], rank)

        total = len(furthest)
        stages = []
        previous_count = total
        for rank, stage in enumerate(FUNNEL_ORDER):
            count = sum(1 for value in furthest.values() if value >= rank)
            stages.append(
                FunnelStage(
                    stage=stage,
                    count=count,
                    conversion_rate=_percent(count, total),
                    stage_rate=_percent(count, previous_count),
                )
            )
            previous_count = count

        return ConversionFunnel(
            job_id=job_id,
            total_applications=total,
            stages=stages,
            conversion_rates={s.stage.value: s.conversion_rate for s in stages},
        )

    async def stage_time_stats(
        self, job_id: int | None = None, company_id: int | None = None
    ) -> list[StageTimeStats]:
        """Duration of completed stages per stage name, in whole days."""
        async with self.store.reader() as session:
            spans = await self.store.completed_stage_spans(session, job_id, company_id)

        durations: dict[ApplicationStatus, list[int]] = defaultdict(list)
        for stage_name, started_at, completed_at in spans:
            durations[ApplicationStatus(stage_name)].append(
                max((completed_at - started_at).days, 0)
            )

        stats = []
        for stage_name in ApplicationStatus:
            days = durations.get(stage_name)
            if not days:
                continue
            stats.append(
                StageTimeStats(
                    stage_name=stage_name,
                    count=len(days),
                    average_days=round(sum(days) / len(days), 2),
                    min_days=float(min(days)),
                    max_days=float(max(days)),
                )
            )
        return stats

    async def application_trend(
        self,
        start_date: date,
        end_date: date,
        job_id: int | None = None,
        company_id: int | None = None,
    ) -> ApplicationTrend:
        """Daily application counts, one point per day in the range.

        Without a job or company filter the trend covers every application.
        """
        if end_date < start_date:
            raise ValidationError("Trend end date must not be before its start date")
        if (end_date - start_date).days >= MAX_TREND_DAYS:
            raise ValidationError(f"Trend range cannot exceed {MAX_TREND_DAYS} days")

        start = datetime.combine(start_date, time.min)
        end = datetime.combine(end_date + timedelta(days=1), time.min)
        async with self.store.reader() as session:
            rows = await self.store.applications_in_range(
                session, start, end, job_id=job_id, company_id=company_id
            )

        buckets: dict[date, list[tuple[ApplicationStatus, float]]] = defaultdict(list)
        for applied_at, status, match_score in rows:
            buckets[applied_at.date()].append((ApplicationStatus(status), match_score))

        points = []
        running_total = 0.0
        running_count = 0
        day = start_date
        while day <= end_date:
            entries = buckets.get(day, [])
            scores = [score for _, score in entries]
            running_total += sum(scores)
            running_count += len(scores)
            points.append(
                TrendPoint(
                    date=day,
                    total_applications=len(entries),
                    hired_count=sum(
                        1 for status, _ in entries if status == ApplicationStatus.HIRED
                    ),
                    rejected_count=sum(
                        1 for status, _ in entries if status == ApplicationStatus.REJECTED
                    ),
                    average_match_score=(
                        round(sum(scores) / len(scores), 2) if scores else 0.0
                    ),
                    running_average_match_score=(
                        round(running_total / running_count, 2) if running_count else 0.0
                    ),
                )
            )
            day += timedelta(days=1)

        return ApplicationTrend(
            job_id=job_id,
            company_id=company_id,
            start_date=start_date,
            end_date=end_date,
            points=points,
        )

    async def top_applicants(self, job_id: int, limit: int = 10) -> list[Application]:
        """Highest match scores first; earlier applications win ties."""
        limit = min(max(limit, 1), MAX_TOP_APPLICANTS)
        async with self.store.reader() as session:
            return await self.store.top_applicants(session, job_id, limit)

    async def source_stats(
        self, job_id: int | None = None, company_id: int | None = None
    ) -> list[SourceStats]:
        async with self.store.reader() as session:
            rows = await self.store.source_aggregates(session, job_id, company_id)
        return [
            SourceStats(
                source=source,
                count=count,
                hired_count=hired_count,
                conversion_rate=_percent(hired_count, count),
                average_match_score=round(average, 2),
            )
            for source, count, hired_count, average in rows
        ]

    async def application_stats(self, application_id: int) -> ApplicationStats:
        """Summary of one application's history."""
        now = _utc_now()
        async with self.store.reader() as session:
            application = await self.store.get_application(session, application_id)
            stages = await self.store.list_stages(session, application_id)
            interviews = await self.store.list_interviews(session, application_id)
            note_count = await self.store.count_owned(
                session, ApplicationNote, application_id
            )
            document_count = await self.store.count_owned(
                session, ApplicationDocument, application_id
            )
            verified_count = await self.store.count_owned(
                session,
                ApplicationDocument,
                application_id,
                ApplicationDocument.is_verified.is_(True),
            )

        current = next((stage for stage in stages if not stage.is_completed), None)
        completed = [
            interview
            for interview in interviews
            if interview.status == InterviewStatus.COMPLETED
        ]
        scored = [i.calculate_average_score() for i in completed if i.has_scores()]

        return ApplicationStats(
            application_id=application.id,
            status=application.status,
            days_since_applied=application.days_since_applied(now),
            stage_count=len(stages),
            current_stage=current.stage_name if current else None,
            days_in_current_stage=(now - current.started_at).days if current else None,
            interview_count=len(interviews),
            completed_interview_count=len(completed),
            average_interview_score=round(sum(scored) / len(scored), 2) if scored else 0.0,
            note_count=note_count,
            document_count=document_count,
            verified_document_count=verified_count,
        )

    async def application_timeline(self, application_id: int) -> ApplicationTimeline:
        """Submission, stage changes and scheduled interviews in date order."""
        async with self.store.reader() as session:
            application = await self.store.get_application(session, application_id)
            stages = await self.store.list_stages(session, application_id)
            interviews = await self.store.list_interviews(session, application_id)

        events = [
            TimelineEvent(
                date=application.applied_at,
                event_type="application_submitted",
                description="Application submitted",
                actor_id=application.user_id,
            )
        ]
        # The first stage is opened by the submission itself
        for stage in stages[1:]:
            events.append(
                TimelineEvent(
                    date=stage.started_at,
                    event_type="stage_change",
                    description=f"Moved to {stage.stage_name.value} stage",
                    actor_id=stage.handled_by,
                )
            )
        for interview in interviews:
            kind = interview.interview_type.value.capitalize()
            events.append(
                TimelineEvent(
                    date=interview.scheduled_at,
                    event_type="interview_scheduled",
                    description=f"{kind} interview scheduled",
                    actor_id=interview.interviewer_id,
                )
            )
        events.sort(key=lambda event: event.date)

        progress = []
        for stage in stages:
            duration = stage.duration
            progress.append(
                StageProgress(
                    stage_name=stage.stage_name,
                    started_at=stage.started_at,
                    completed_at=stage.completed_at,
                    duration_hours=(
                        round(duration.total_seconds() / 3600, 1)
                        if duration is not None
                        else None
                    ),
                    status="completed" if stage.is_completed else "in_progress",
                )
            )

        return ApplicationTimeline(
            application_id=application.id, events=events, stage_progress=progress
        )

    async def user_application_stats(self, user_id: int) -> UserApplicationStats:
        """Status counts and outcomes across one candidate's applications."""
        async with self.store.reader() as session:
            counts, average = await self.store.status_counts(session, user_id=user_id)
            spans = await self.store.first_response_spans(session, user_id)

        total = sum(counts.values())
        response_days = [
            (completed_at - applied_at).total_seconds() / 86400
            for applied_at, completed_at in spans
        ]
        return UserApplicationStats(
            user_id=user_id,
            total_applications=total,
            by_status={status.value: counts.get(status, 0) for status in ApplicationStatus},
            average_match_score=round(average, 2),
            success_rate=_percent(counts.get(ApplicationStatus.HIRED, 0), total),
            average_response_days=(
                round(sum(response_days) / len(response_days), 2)
                if response_days
                else 0.0
            ),
        )

    async def job_status_breakdown(self, job_id: int) -> JobStatusBreakdown:
        async with self.store.reader() as session:
            counts, average = await self.store.status_counts(session, job_id)
        return JobStatusBreakdown(
            job_id=job_id,
            total_applications=sum(counts.values()),
            by_status={status.value: counts.get(status, 0) for status in ApplicationStatus},
            average_match_score=round(average, 2),
        )
