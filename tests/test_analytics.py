"""Tests for hiring analytics."""

from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy import update

from app.core.exceptions import NotFoundError, ValidationError
from app.models import Application, ApplicationStage, ApplicationStatus
from app.schemas.document import DocumentCreate
from app.schemas.interview import InterviewCreate, InterviewScores
from app.schemas.note import NoteCreate


async def _set_applied_at(store, application_id: int, when: datetime) -> None:
    async with store.transaction() as session:
        await session.execute(
            update(Application)
            .where(Application.id == application_id)
            .values(applied_at=when)
        )


async def _set_stage_span(store, stage_id: int, started: datetime, completed: datetime):
    async with store.transaction() as session:
        await session.execute(
            update(ApplicationStage)
            .where(ApplicationStage.id == stage_id)
            .values(started_at=started, completed_at=completed)
        )


class TestConversionFunnel:
    """Tests for the conversion funnel."""

    @pytest.mark.asyncio
    async def test_counts_furthest_stage(self, submit, transitions, advance, analytics):
        """Test that rejected candidates count for the stages they reached."""
        await submit(job_id=1, user_id=1)
        screening = await submit(job_id=1, user_id=2)
        await advance(screening.id, ApplicationStatus.SCREENING)
        rejected = await submit(job_id=1, user_id=3)
        await advance(rejected.id, ApplicationStatus.INTERVIEW)
        await transitions.reject(rejected.id)
        hired = await submit(job_id=1, user_id=4)
        await advance(hired.id, ApplicationStatus.HIRED)
        await submit(job_id=2, user_id=1)

        funnel = await analytics.conversion_funnel(job_id=1)

        assert funnel.total_applications == 4
        assert [s.stage for s in funnel.stages] == [
            ApplicationStatus.APPLIED,
            ApplicationStatus.SCREENING,
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.INTERVIEW,
            ApplicationStatus.OFFERED,
            ApplicationStatus.HIRED,
        ]
        assert [s.count for s in funnel.stages] == [4, 3, 2, 2, 1, 1]
        assert funnel.conversion_rates == {
            "applied": 100.0,
            "screening": 75.0,
            "shortlisted": 50.0,
            "interview": 50.0,
            "offered": 25.0,
            "hired": 25.0,
        }
        assert [s.stage_rate for s in funnel.stages] == [
            100.0, 75.0, 66.67, 100.0, 50.0, 100.0
        ]

    @pytest.mark.asyncio
    async def test_rates_never_increase(self, submit, transitions, advance, analytics):
        """Test that cumulative rates are monotone along the funnel."""
        for user, target in enumerate(
            [
                ApplicationStatus.SCREENING,
                ApplicationStatus.OFFERED,
                ApplicationStatus.SHORTLISTED,
                ApplicationStatus.HIRED,
            ],
            start=1,
        ):
            application = await submit(job_id=9, user_id=user)
            await advance(application.id, target)
            if target in (ApplicationStatus.SCREENING, ApplicationStatus.SHORTLISTED):
                await transitions.withdraw(application.id, user_id=user)

        funnel = await analytics.conversion_funnel(job_id=9)
        rates = [s.conversion_rate for s in funnel.stages]
        assert rates == sorted(rates, reverse=True)
        assert all(0 <= s.stage_rate <= 100 for s in funnel.stages)

    @pytest.mark.asyncio
    async def test_empty_job(self, analytics):
        """Test the funnel of a job without applications."""
        funnel = await analytics.conversion_funnel(job_id=123)
        assert funnel.total_applications == 0
        assert all(s.count == 0 and s.conversion_rate == 0.0 for s in funnel.stages)


class TestStageTimes:
    """Tests for stage duration statistics."""

    @pytest.mark.asyncio
    async def test_completed_stage_durations(
        self, submit, transitions, stage_tracker, store, analytics
    ):
        """Test min, max and average days per completed stage."""
        start = datetime(2026, 2, 1, 9, 0)
        for user, days in ((1, 3), (2, 1)):
            application = await submit(job_id=7, user_id=user)
            await transitions.move_to_screening(application.id)
            applied_stage = (await stage_tracker.get_stage_history(application.id))[0]
            await _set_stage_span(
                store, applied_stage.id, start, start + timedelta(days=days, hours=5)
            )

        stats = await analytics.stage_time_stats(job_id=7)

        assert len(stats) == 1
        applied = stats[0]
        assert applied.stage_name == ApplicationStatus.APPLIED
        assert applied.count == 2
        assert applied.average_days == 2.0
        assert applied.min_days == 1.0
        assert applied.max_days == 3.0

    @pytest.mark.asyncio
    async def test_open_stages_excluded(self, submit, analytics):
        """Test that stages still in progress are not measured."""
        await submit(job_id=7, user_id=1)
        assert await analytics.stage_time_stats(job_id=7) == []


class TestApplicationTrend:
    """Tests for the daily application trend."""

    @pytest.mark.asyncio
    async def test_zero_filled_days(self, submit, transitions, advance, store, analytics):
        """Test daily points including days without applications."""
        first = await submit(job_id=5, user_id=1, match_score=60)
        await _set_applied_at(store, first.id, datetime(2026, 3, 1, 10, 0))
        hired = await submit(job_id=5, user_id=2, match_score=80)
        await advance(hired.id, ApplicationStatus.HIRED)
        await _set_applied_at(store, hired.id, datetime(2026, 3, 1, 15, 0))
        rejected = await submit(job_id=5, user_id=3, match_score=40)
        await transitions.reject(rejected.id)
        await _set_applied_at(store, rejected.id, datetime(2026, 3, 3, 8, 0))
        outside = await submit(job_id=5, user_id=4, match_score=99)
        await _set_applied_at(store, outside.id, datetime(2026, 3, 5, 0, 0))

        trend = await analytics.application_trend(
            date(2026, 3, 1), date(2026, 3, 4), job_id=5
        )

        assert [p.date for p in trend.points] == [
            date(2026, 3, 1),
            date(2026, 3, 2),
            date(2026, 3, 3),
            date(2026, 3, 4),
        ]
        assert [p.total_applications for p in trend.points] == [2, 0, 1, 0]
        assert [p.hired_count for p in trend.points] == [1, 0, 0, 0]
        assert [p.rejected_count for p in trend.points] == [0, 0, 1, 0]
        assert [p.average_match_score for p in trend.points] == [70.0, 0.0, 40.0, 0.0]
        assert [p.running_average_match_score for p in trend.points] == [
            70.0, 70.0, 60.0, 60.0
        ]

    @pytest.mark.asyncio
    async def test_single_day(self, analytics):
        """Test a one-day range without data."""
        trend = await analytics.application_trend(
            date(2026, 3, 1), date(2026, 3, 1), job_id=5
        )
        assert len(trend.points) == 1
        assert trend.points[0].total_applications == 0

    @pytest.mark.asyncio
    async def test_invalid_ranges(self, analytics):
        """Test reversed and oversized ranges."""
        with pytest.raises(ValidationError):
            await analytics.application_trend(
                date(2026, 3, 2), date(2026, 3, 1), job_id=5
            )
        with pytest.raises(ValidationError):
            await analytics.application_trend(
                date(2025, 1, 1), date(2026, 3, 1), job_id=5
            )

    @pytest.mark.asyncio
    async def test_across_jobs_and_companies(self, submit, store, analytics):
        """Test the trend without a job filter and per company."""
        first = await submit(job_id=1, user_id=1, company_id=7, match_score=50)
        second = await submit(job_id=2, user_id=1, company_id=7, match_score=70)
        other = await submit(job_id=3, user_id=2, company_id=8, match_score=90)
        for application in (first, second, other):
            await _set_applied_at(store, application.id, datetime(2026, 4, 2, 9, 0))

        overall = await analytics.application_trend(date(2026, 4, 1), date(2026, 4, 2))
        assert overall.job_id is None
        assert overall.company_id is None
        assert [p.total_applications for p in overall.points] == [0, 3]
        assert overall.points[1].average_match_score == 70.0

        company = await analytics.application_trend(
            date(2026, 4, 1), date(2026, 4, 2), company_id=7
        )
        assert company.company_id == 7
        assert [p.total_applications for p in company.points] == [0, 2]
        assert company.points[1].average_match_score == 60.0


class TestRankings:
    """Tests for top applicants and source statistics."""

    @pytest.mark.asyncio
    async def test_top_applicants_tiebreak(self, submit, store, analytics):
        """Test that earlier applications win score ties."""
        early = await submit(job_id=4, user_id=1, match_score=90)
        late = await submit(job_id=4, user_id=2, match_score=90)
        await submit(job_id=4, user_id=3, match_score=50)
        await _set_applied_at(store, early.id, datetime(2026, 1, 1))
        await _set_applied_at(store, late.id, datetime(2026, 1, 2))

        top = await analytics.top_applicants(job_id=4, limit=2)
        assert [a.id for a in top] == [early.id, late.id]

        assert len(await analytics.top_applicants(job_id=4, limit=0)) == 1

    @pytest.mark.asyncio
    async def test_source_stats(self, submit, advance, analytics):
        """Test per-source counts and hire rates."""
        hired = await submit(job_id=6, user_id=1, source="referral", match_score=80)
        await advance(hired.id, ApplicationStatus.HIRED)
        await submit(job_id=6, user_id=2, source="referral", match_score=60)
        await submit(job_id=6, user_id=3, match_score=30)

        stats = await analytics.source_stats(job_id=6)

        assert [s.source for s in stats] == ["referral", "job_portal"]
        referral = stats[0]
        assert referral.count == 2
        assert referral.hired_count == 1
        assert referral.conversion_rate == 50.0
        assert referral.average_match_score == 70.0
        assert stats[1].conversion_rate == 0.0


class TestApplicationStats:
    """Tests for per-application statistics."""

    @pytest.mark.asyncio
    async def test_summary(self, submit, transitions, interviews, note_ledger, documents, analytics):
        """Test the summary of an application with some history."""
        application = await submit(
            user_id=3,
            documents=[DocumentCreate(file_url="https://files.local/cv.pdf")],
        )
        await transitions.move_to_screening(application.id)
        first = await interviews.schedule(
            InterviewCreate(
                application_id=application.id,
                scheduled_at=datetime.now(UTC) + timedelta(days=1),
            )
        )
        await interviews.schedule(
            InterviewCreate(
                application_id=application.id,
                scheduled_at=datetime.now(UTC) + timedelta(days=2),
            )
        )
        await interviews.complete(
            first.id, InterviewScores(technical_score=70, communication_score=90)
        )
        await note_ledger.add_note(
            NoteCreate(application_id=application.id, note_text="Good call"), author_id=5
        )
        upload = await documents.upload(
            application.id,
            DocumentCreate(file_url="https://files.local/diploma.pdf"),
            user_id=3,
        )
        await documents.verify(upload.id, verifier_id=9)

        stats = await analytics.application_stats(application.id)

        assert stats.status == ApplicationStatus.SCREENING
        assert stats.days_since_applied == 0
        assert stats.stage_count == 2
        assert stats.current_stage == ApplicationStatus.SCREENING
        assert stats.days_in_current_stage == 0
        assert stats.interview_count == 2
        assert stats.completed_interview_count == 1
        assert stats.average_interview_score == 80.0
        assert stats.note_count == 1
        assert stats.document_count == 2
        assert stats.verified_document_count == 1

    @pytest.mark.asyncio
    async def test_missing_application(self, analytics):
        """Test statistics of an unknown application."""
        with pytest.raises(NotFoundError):
            await analytics.application_stats(404)

    @pytest.mark.asyncio
    async def test_timeline(
        self, submit, transitions, interviews, stage_tracker, store, analytics
    ):
        """Test events and stage progress of one application."""
        application = await submit(user_id=6)
        await transitions.transition(
            application.id, ApplicationStatus.SCREENING, actor_id=40
        )
        history = await stage_tracker.get_stage_history(application.id)
        await _set_stage_span(
            store,
            history[0].id,
            history[0].started_at,
            history[0].started_at + timedelta(hours=30),
        )
        interview = await interviews.schedule(
            InterviewCreate(
                application_id=application.id,
                interviewer_id=41,
                scheduled_at=datetime.now(UTC) + timedelta(days=3),
            )
        )

        timeline = await analytics.application_timeline(application.id)

        assert [e.event_type for e in timeline.events] == [
            "application_submitted",
            "stage_change",
            "interview_scheduled",
        ]
        assert timeline.events[0].actor_id == 6
        assert timeline.events[1].description == "Moved to screening stage"
        assert timeline.events[1].actor_id == 40
        assert timeline.events[2].actor_id == 41
        assert timeline.events[2].date == interview.scheduled_at

        progress = timeline.stage_progress
        assert [p.stage_name for p in progress] == [
            ApplicationStatus.APPLIED,
            ApplicationStatus.SCREENING,
        ]
        assert progress[0].status == "completed"
        assert progress[0].duration_hours == 30.0
        assert progress[1].status == "in_progress"
        assert progress[1].duration_hours is None
        assert progress[1].completed_at is None

    @pytest.mark.asyncio
    async def test_timeline_missing_application(self, analytics):
        """Test the timeline of an unknown application."""
        with pytest.raises(NotFoundError):
            await analytics.application_timeline(404)


class TestUserApplicationStats:
    """Tests for per-candidate statistics."""

    @pytest.mark.asyncio
    async def test_counts_by_status(
        self, submit, transitions, advance, stage_tracker, store, analytics
    ):
        """Test status counts, success rate and response time of one user."""
        await submit(job_id=1, user_id=12, match_score=40)
        screened = await submit(job_id=2, user_id=12, match_score=60)
        await transitions.move_to_screening(screened.id)
        hired = await submit(job_id=3, user_id=12, match_score=80)
        await advance(hired.id, ApplicationStatus.HIRED)
        await submit(job_id=3, user_id=13, match_score=10)

        for application, hours in ((screened, 24), (hired, 72)):
            first = (await stage_tracker.get_stage_history(application.id))[0]
            await _set_applied_at(store, application.id, first.started_at)
            await _set_stage_span(
                store,
                first.id,
                first.started_at,
                first.started_at + timedelta(hours=hours),
            )

        stats = await analytics.user_application_stats(12)

        assert stats.user_id == 12
        assert stats.total_applications == 3
        assert len(stats.by_status) == len(ApplicationStatus)
        assert stats.by_status["applied"] == 1
        assert stats.by_status["screening"] == 1
        assert stats.by_status["hired"] == 1
        assert stats.by_status["withdrawn"] == 0
        assert stats.average_match_score == 60.0
        assert stats.success_rate == 33.33
        assert stats.average_response_days == 2.0

    @pytest.mark.asyncio
    async def test_user_without_applications(self, analytics):
        """Test that an unknown user gets zeroed statistics."""
        stats = await analytics.user_application_stats(99)
        assert stats.total_applications == 0
        assert set(stats.by_status.values()) == {0}
        assert stats.success_rate == 0.0
        assert stats.average_response_days == 0.0


class TestStatusBreakdown:
    """Tests for per-job status counts."""

    @pytest.mark.asyncio
    async def test_breakdown(self, submit, transitions, analytics):
        """Test counts for every status, including empty ones."""
        await submit(job_id=8, user_id=1, match_score=20)
        rejected = await submit(job_id=8, user_id=2, match_score=40)
        await transitions.reject(rejected.id)

        breakdown = await analytics.job_status_breakdown(8)

        assert breakdown.total_applications == 2
        assert breakdown.by_status["applied"] == 1
        assert breakdown.by_status["rejected"] == 1
        assert breakdown.by_status["hired"] == 0
        assert len(breakdown.by_status) == len(ApplicationStatus)
        assert breakdown.average_match_score == 30.0
