"""Schemas for application submission, transitions and listing."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ApplicationStatus
from app.schemas.document import DocumentCreate


class ApplicationCreate(BaseModel):
    """Submission of a new application."""

    job_id: int = Field(..., gt=0, description="Job being applied to")
    user_id: int = Field(..., gt=0, description="Applicant")
    company_id: int | None = Field(default=None, gt=0, description="Hiring company")
    source: str | None = Field(
        default=None, max_length=50, description="Origin channel of the application"
    )
    match_score: float = Field(
        default=0.0, description="Precomputed job/candidate relevance (0-100)"
    )
    resume_url: str | None = None
    cover_letter: str | None = None
    documents: list[DocumentCreate] = Field(default_factory=list)


class ApplicationCriteria(BaseModel):
    """Filter and sort criteria for application listing."""

    status: ApplicationStatus | None = None
    job_id: int | None = None
    user_id: int | None = None
    company_id: int | None = None
    min_score: float | None = None
    max_score: float | None = None
    viewed_only: bool = False
    bookmarked_only: bool = False
    source: str | None = None
    applied_after: datetime | None = None
    applied_before: datetime | None = None
    sort_by: Literal["latest", "score_desc", "score_asc"] = "latest"


class StageResponse(BaseModel):
    """One entry of the stage history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    stage_name: ApplicationStatus
    description: str | None = None
    handled_by: int | None = None
    started_at: datetime
    completed_at: datetime | None = None
    duration_days: int | None = None
    notes: str | None = None


class StageComplete(BaseModel):
    """Manual stage completion (administrative correction)."""

    notes: str | None = None


class ApplicationResponse(BaseModel):
    """Application as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    user_id: int
    company_id: int | None = None
    status: ApplicationStatus
    source: str
    match_score: float
    resume_url: str | None = None
    viewed_by_employer: bool
    is_bookmarked: bool
    applied_at: datetime
    created_at: datetime
    updated_at: datetime


class ApplicationListResponse(BaseModel):
    """Paginated application list."""

    applications: list[ApplicationResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class TransitionRequest(BaseModel):
    """Move an application to a new status."""

    status: ApplicationStatus
    notes: str | None = Field(default=None, description="Free text for the new stage")


class WithdrawRequest(BaseModel):
    """Applicant-initiated withdrawal."""

    reason: str | None = None


class RejectRequest(BaseModel):
    """Employer rejection."""

    reason: str | None = None


class BulkTransitionRequest(BaseModel):
    """Apply the same transition to many applications."""

    application_ids: list[int] = Field(..., min_length=1)
    status: ApplicationStatus
    notes: str | None = None


class BulkRejectRequest(BaseModel):
    """Reject many applications with one reason."""

    application_ids: list[int] = Field(..., min_length=1)
    reason: str | None = None


class BulkDeleteRequest(BaseModel):
    """Administrative removal of applications."""

    application_ids: list[int] = Field(..., min_length=1)


class BulkItemResult(BaseModel):
    """Outcome of one item of a bulk operation."""

    application_id: int
    status: Literal["success", "error"]
    new_status: ApplicationStatus | None = None
    error: str | None = Field(default=None, description="Error class name")
    error_detail: str | None = None


class BulkOperationResponse(BaseModel):
    """Per-item outcomes of a bulk operation."""

    results: list[BulkItemResult]
    success_count: int
    error_count: int

    @classmethod
    def from_results(cls, results: list[BulkItemResult]) -> "BulkOperationResponse":
        success_count = sum(1 for result in results if result.status == "success")
        return cls(
            results=results,
            success_count=success_count,
            error_count=len(results) - success_count,
        )
