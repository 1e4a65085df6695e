"""Schemas for hiring analytics read models."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.enums import ApplicationStatus


class FunnelStage(BaseModel):
    """Applications that reached one funnel stage."""

    stage: ApplicationStatus
    count: int
    conversion_rate: float = Field(
        ..., description="Percent of all applications that reached this stage"
    )
    stage_rate: float = Field(
        ..., description="Percent of the previous stage that reached this one"
    )


class ConversionFunnel(BaseModel):
    job_id: int
    total_applications: int
    stages: list[FunnelStage]
    conversion_rates: dict[str, float]


class StageTimeStats(BaseModel):
    """Closed-stage duration statistics, in days."""

    stage_name: ApplicationStatus
    count: int
    average_days: float
    min_days: float
    max_days: float


class TrendPoint(BaseModel):
    date: date
    total_applications: int
    hired_count: int
    rejected_count: int
    average_match_score: float
    running_average_match_score: float


class ApplicationTrend(BaseModel):
    job_id: int | None = None
    company_id: int | None = None
    start_date: date
    end_date: date
    points: list[TrendPoint]


class SourceStats(BaseModel):
    source: str
    count: int
    hired_count: int
    conversion_rate: float
    average_match_score: float


class ApplicationStats(BaseModel):
    """Per-application summary."""

    application_id: int
    status: ApplicationStatus
    days_since_applied: int
    stage_count: int
    current_stage: ApplicationStatus | None = None
    days_in_current_stage: int | None = None
    interview_count: int
    completed_interview_count: int
    average_interview_score: float
    note_count: int
    document_count: int
    verified_document_count: int


class JobStatusBreakdown(BaseModel):
    job_id: int
    total_applications: int
    by_status: dict[str, int]
    average_match_score: float


class UserApplicationStats(BaseModel):
    """Counts across every application of one candidate."""

    user_id: int
    total_applications: int
    by_status: dict[str, int]
    average_match_score: float
    success_rate: float = Field(..., description="Percent of applications that ended hired")
    average_response_days: float = Field(
        ..., description="Mean days until an application left the applied stage"
    )


class TimelineEvent(BaseModel):
    date: datetime
    event_type: str
    description: str
    actor_id: int | None = None


class StageProgress(BaseModel):
    stage_name: ApplicationStatus
    started_at: datetime
    completed_at: datetime | None = None
    duration_hours: float | None = None
    status: str


class ApplicationTimeline(BaseModel):
    """Chronological history of one application."""

    application_id: int
    events: list[TimelineEvent]
    stage_progress: list[StageProgress]
