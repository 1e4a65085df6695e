"""Schemas for interview scheduling and evaluation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import InterviewStatus, InterviewType


class InterviewCreate(BaseModel):
    """Request to schedule an interview."""

    application_id: int = Field(..., gt=0)
    stage_id: int | None = Field(default=None, description="Stage the interview belongs to")
    interviewer_id: int | None = None
    scheduled_at: datetime
    interview_type: InterviewType = InterviewType.ONLINE
    meeting_link: str | None = None
    location: str | None = None


class InterviewReschedule(BaseModel):
    """Move an interview to a new time."""

    scheduled_at: datetime
    reason: str | None = None
    meeting_link: str | None = None
    location: str | None = None


class InterviewScores(BaseModel):
    """Evaluation scores; each is optional and range-checked by the scheduler."""

    overall_score: float | None = None
    technical_score: float | None = None
    communication_score: float | None = None
    personality_score: float | None = None


class InterviewComplete(InterviewScores):
    """Completion of an interview with its evaluation."""

    remarks: str | None = None
    feedback_summary: str | None = None


class InterviewCancel(BaseModel):
    reason: str | None = None


class InterviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    stage_id: int | None = None
    interviewer_id: int | None = None
    scheduled_at: datetime
    ended_at: datetime | None = None
    interview_type: InterviewType
    meeting_link: str | None = None
    location: str | None = None
    status: InterviewStatus
    overall_score: float | None = None
    technical_score: float | None = None
    communication_score: float | None = None
    personality_score: float | None = None
    remarks: str | None = None
    feedback_summary: str | None = None
    reschedule_reasons: str | None = None
    reminder_sent_at: datetime | None = None

    average_score: float = 0.0
    has_scores: bool = False

    @classmethod
    def from_interview(cls, interview) -> "InterviewResponse":
        response = cls.model_validate(interview)
        response.average_score = interview.calculate_average_score()
        response.has_scores = interview.has_scores()
        return response
