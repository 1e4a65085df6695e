"""API routes for applications and their stage history."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from app.models import ApplicationStatus
from app.schemas.application import (
    ApplicationCreate,
    ApplicationCriteria,
    ApplicationListResponse,
    ApplicationResponse,
    BulkDeleteRequest,
    BulkOperationResponse,
    BulkRejectRequest,
    BulkTransitionRequest,
    RejectRequest,
    StageComplete,
    StageResponse,
    TransitionRequest,
    WithdrawRequest,
)
from app.services.dependencies import (
    get_actor_id,
    get_stage_tracker,
    get_transition_engine,
    require_actor,
)
from app.services.stage_tracker import StageTracker
from app.services.transition_engine import TransitionEngine

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    request: ApplicationCreate,
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Submit a new application."""
    return await engine.submit(request)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    engine: TransitionEngine = Depends(get_transition_engine),
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    job_id: int | None = None,
    user_id: int | None = None,
    company_id: int | None = None,
    min_score: float | None = Query(default=None, ge=0, le=100),
    max_score: float | None = Query(default=None, ge=0, le=100),
    viewed_only: bool = False,
    bookmarked_only: bool = False,
    source: str | None = None,
    applied_after: datetime | None = None,
    applied_before: datetime | None = None,
    sort_by: Literal["latest", "score_desc", "score_asc"] = "latest",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    """List applications matching the given filters."""
    criteria = ApplicationCriteria(
        status=status_filter,
        job_id=job_id,
        user_id=user_id,
        company_id=company_id,
        min_score=min_score,
        max_score=max_score,
        viewed_only=viewed_only,
        bookmarked_only=bookmarked_only,
        source=source,
        applied_after=applied_after,
        applied_before=applied_before,
        sort_by=sort_by,
    )
    return await engine.list_applications(criteria, page, limit)


# Bulk operations


@router.post("/bulk/status", response_model=BulkOperationResponse)
async def bulk_update_status(
    request: BulkTransitionRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int | None = Depends(get_actor_id),
):
    """Transition many applications; each outcome is reported separately."""
    results = await engine.bulk_update_status(
        request.application_ids, request.status, actor_id, request.notes
    )
    return BulkOperationResponse.from_results(results)


@router.post("/bulk/move", response_model=BulkOperationResponse)
async def bulk_move_to_stage(
    request: BulkTransitionRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int | None = Depends(get_actor_id),
):
    results = await engine.bulk_move_to_stage(
        request.application_ids, request.status, actor_id, request.notes
    )
    return BulkOperationResponse.from_results(results)


@router.post("/bulk/reject", response_model=BulkOperationResponse)
async def bulk_reject(
    request: BulkRejectRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int | None = Depends(get_actor_id),
):
    results = await engine.bulk_reject(request.application_ids, actor_id, request.reason)
    return BulkOperationResponse.from_results(results)


@router.post("/bulk/delete")
async def bulk_delete(
    request: BulkDeleteRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
):
    """Hard-delete applications together with everything they own."""
    deleted = await engine.bulk_delete(request.application_ids)
    return {"deleted": deleted}


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    engine: TransitionEngine = Depends(get_transition_engine),
):
    return await engine.get_application(application_id)


@router.post("/{application_id}/transition", response_model=ApplicationResponse)
async def transition_application(
    application_id: int,
    request: TransitionRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int | None = Depends(get_actor_id),
):
    """Move an application to another status."""
    return await engine.transition(application_id, request.status, actor_id, request.notes)


@router.post("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: int,
    request: RejectRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int | None = Depends(get_actor_id),
):
    return await engine.reject(application_id, actor_id, request.reason)


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(
    application_id: int,
    request: WithdrawRequest,
    engine: TransitionEngine = Depends(get_transition_engine),
    actor_id: int = Depends(require_actor),
):
    """Withdraw an application; only the applicant may do this."""
    return await engine.withdraw(application_id, actor_id, request.reason)


@router.post("/{application_id}/view", response_model=ApplicationResponse)
async def mark_viewed(
    application_id: int,
    engine: TransitionEngine = Depends(get_transition_engine),
):
    return await engine.mark_viewed(application_id)


@router.post("/{application_id}/bookmark", response_model=ApplicationResponse)
async def toggle_bookmark(
    application_id: int,
    engine: TransitionEngine = Depends(get_transition_engine),
):
    return await engine.toggle_bookmark(application_id)


# Stage history


@router.get("/{application_id}/stages", response_model=list[StageResponse])
async def get_stage_history(
    application_id: int,
    tracker: StageTracker = Depends(get_stage_tracker),
):
    return await tracker.get_stage_history(application_id)


@router.get("/{application_id}/stages/current", response_model=StageResponse)
async def get_current_stage(
    application_id: int,
    tracker: StageTracker = Depends(get_stage_tracker),
):
    return await tracker.get_current_stage(application_id)


@router.post("/stages/{stage_id}/complete", response_model=StageResponse)
async def complete_stage(
    stage_id: int,
    request: StageComplete,
    tracker: StageTracker = Depends(get_stage_tracker),
):
    """Close a stage manually (administrative correction)."""
    return await tracker.complete_stage(stage_id, request.notes)


@router.delete("/stages/{stage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stage(
    stage_id: int,
    tracker: StageTracker = Depends(get_stage_tracker),
):
    await tracker.delete_stage(stage_id)
