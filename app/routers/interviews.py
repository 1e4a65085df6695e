"""API routes for interviews."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from app.schemas.interview import (
    InterviewCancel,
    InterviewComplete,
    InterviewCreate,
    InterviewReschedule,
    InterviewResponse,
    InterviewScores,
)
from app.services.dependencies import get_actor_id, get_interview_scheduler
from app.services.interview_scheduler import InterviewScheduler

router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.post("", response_model=InterviewResponse, status_code=status.HTTP_201_CREATED)
async def schedule_interview(
    request: InterviewCreate,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
    actor_id: int | None = Depends(get_actor_id),
):
    """Schedule an interview for an application."""
    interview = await scheduler.schedule(request, actor_id)
    return InterviewResponse.from_interview(interview)


@router.get("/upcoming", response_model=list[InterviewResponse])
async def list_upcoming(
    days: int = Query(default=7, ge=1, le=90),
    interviewer_id: int | None = None,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interviews = await scheduler.list_upcoming(days, interviewer_id)
    return [InterviewResponse.from_interview(i) for i in interviews]


@router.get("/range", response_model=list[InterviewResponse])
async def list_in_range(
    start: datetime,
    end: datetime,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interviews = await scheduler.list_in_range(start, end)
    return [InterviewResponse.from_interview(i) for i in interviews]


@router.get("/application/{application_id}", response_model=list[InterviewResponse])
async def list_for_application(
    application_id: int,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interviews = await scheduler.list_for_application(application_id)
    return [InterviewResponse.from_interview(i) for i in interviews]


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview(
    interview_id: int,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    return InterviewResponse.from_interview(await scheduler.get_interview(interview_id))


@router.post("/{interview_id}/reschedule", response_model=InterviewResponse)
async def reschedule_interview(
    interview_id: int,
    request: InterviewReschedule,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
    actor_id: int | None = Depends(get_actor_id),
):
    interview = await scheduler.reschedule(
        interview_id,
        request.scheduled_at,
        reason=request.reason,
        actor_id=actor_id,
        meeting_link=request.meeting_link,
        location=request.location,
    )
    return InterviewResponse.from_interview(interview)


@router.post("/{interview_id}/complete", response_model=InterviewResponse)
async def complete_interview(
    interview_id: int,
    request: InterviewComplete,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
    actor_id: int | None = Depends(get_actor_id),
):
    """Record the evaluation of an interview."""
    scores = InterviewScores(
        overall_score=request.overall_score,
        technical_score=request.technical_score,
        communication_score=request.communication_score,
        personality_score=request.personality_score,
    )
    interview = await scheduler.complete(
        interview_id,
        scores,
        remarks=request.remarks,
        feedback_summary=request.feedback_summary,
        actor_id=actor_id,
    )
    return InterviewResponse.from_interview(interview)


@router.post("/{interview_id}/cancel", response_model=InterviewResponse)
async def cancel_interview(
    interview_id: int,
    request: InterviewCancel,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
    actor_id: int | None = Depends(get_actor_id),
):
    interview = await scheduler.cancel(interview_id, request.reason, actor_id)
    return InterviewResponse.from_interview(interview)


@router.post("/{interview_id}/no-show", response_model=InterviewResponse)
async def mark_no_show(
    interview_id: int,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
    actor_id: int | None = Depends(get_actor_id),
):
    interview = await scheduler.mark_no_show(interview_id, actor_id)
    return InterviewResponse.from_interview(interview)


@router.post("/{interview_id}/reminder", response_model=InterviewResponse)
async def send_reminder(
    interview_id: int,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    return InterviewResponse.from_interview(await scheduler.send_reminder(interview_id))


@router.delete("/{interview_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_interview(
    interview_id: int,
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    await scheduler.delete_interview(interview_id)
