"""API routes for hiring analytics."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.schemas.analytics import (
    ApplicationStats,
    ApplicationTimeline,
    ApplicationTrend,
    ConversionFunnel,
    JobStatusBreakdown,
    SourceStats,
    StageTimeStats,
    UserApplicationStats,
)
from app.schemas.application import ApplicationResponse
from app.services.analytics_engine import AnalyticsEngine
from app.services.dependencies import get_analytics_engine

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/jobs/{job_id}/funnel", response_model=ConversionFunnel)
async def conversion_funnel(
    job_id: int, engine: AnalyticsEngine = Depends(get_analytics_engine)
):
    return await engine.conversion_funnel(job_id)


@router.get("/jobs/{job_id}/trend", response_model=ApplicationTrend)
async def application_trend(
    job_id: int,
    start_date: date,
    end_date: date,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    return await engine.application_trend(start_date, end_date, job_id=job_id)


@router.get("/jobs/{job_id}/top-applicants", response_model=list[ApplicationResponse])
async def top_applicants(
    job_id: int,
    limit: int = Query(default=10, ge=1, le=100),
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    return await engine.top_applicants(job_id, limit)


@router.get("/jobs/{job_id}/status-breakdown", response_model=JobStatusBreakdown)
async def job_status_breakdown(
    job_id: int, engine: AnalyticsEngine = Depends(get_analytics_engine)
):
    return await engine.job_status_breakdown(job_id)


@router.get("/stage-times", response_model=list[StageTimeStats])
async def stage_time_stats(
    job_id: int | None = None,
    company_id: int | None = None,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    return await engine.stage_time_stats(job_id, company_id)


@router.get("/sources", response_model=list[SourceStats])
async def source_stats(
    job_id: int | None = None,
    company_id: int | None = None,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    return await engine.source_stats(job_id, company_id)


@router.get("/applications/{application_id}", response_model=ApplicationStats)
async def application_stats(
    application_id: int, engine: AnalyticsEngine = Depends(get_analytics_engine)
):
    return await engine.application_stats(application_id)


@router.get("/applications/{application_id}/timeline", response_model=ApplicationTimeline)
async def application_timeline(
    application_id: int, engine: AnalyticsEngine = Depends(get_analytics_engine)
):
    return await engine.application_timeline(application_id)


@router.get("/trend", response_model=ApplicationTrend)
async def overall_trend(
    start_date: date,
    end_date: date,
    company_id: int | None = None,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """Daily trend across all jobs, optionally for one company."""
    return await engine.application_trend(start_date, end_date, company_id=company_id)


@router.get("/users/{user_id}", response_model=UserApplicationStats)
async def user_application_stats(
    user_id: int, engine: AnalyticsEngine = Depends(get_analytics_engine)
):
    return await engine.user_application_stats(user_id)
