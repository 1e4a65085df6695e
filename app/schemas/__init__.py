"""Pydantic schemas for request/response validation."""

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
from app.schemas.application import (
    ApplicationCreate,
    ApplicationCriteria,
    ApplicationListResponse,
    ApplicationResponse,
    BulkDeleteRequest,
    BulkItemResult,
    BulkOperationResponse,
    BulkRejectRequest,
    BulkTransitionRequest,
    RejectRequest,
    StageComplete,
    StageResponse,
    TransitionRequest,
    WithdrawRequest,
)
from app.schemas.document import (
    DocumentCreate,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
)
from app.schemas.interview import (
    InterviewCancel,
    InterviewComplete,
    InterviewCreate,
    InterviewReschedule,
    InterviewResponse,
    InterviewScores,
)
from app.schemas.note import NoteCreate, NoteResponse, NoteUpdate

__all__ = [
    "ApplicationCreate",
    "ApplicationCriteria",
    "ApplicationListResponse",
    "ApplicationResponse",
    "ApplicationStats",
    "ApplicationTimeline",
    "ApplicationTrend",
    "BulkDeleteRequest",
    "BulkItemResult",
    "BulkOperationResponse",
    "BulkRejectRequest",
    "BulkTransitionRequest",
    "ConversionFunnel",
    "DocumentCreate",
    "DocumentListResponse",
    "DocumentResponse",
    "DocumentUpdate",
    "FunnelStage",
    "InterviewCancel",
    "InterviewComplete",
    "InterviewCreate",
    "InterviewReschedule",
    "InterviewResponse",
    "InterviewScores",
    "JobStatusBreakdown",
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
    "RejectRequest",
    "SourceStats",
    "StageComplete",
    "StageProgress",
    "StageResponse",
    "StageTimeStats",
    "TimelineEvent",
    "TransitionRequest",
    "TrendPoint",
    "UserApplicationStats",
    "WithdrawRequest",
]
