"""Database models."""

from app.models.application import Application, ApplicationDocument, ApplicationStage
from app.models.enums import (
    ApplicationStatus,
    DocumentType,
    InterviewStatus,
    InterviewType,
    NoteSentiment,
    NoteType,
    NoteVisibility,
)
from app.models.interview import Interview
from app.models.note import ApplicationNote

__all__ = [
    "Application",
    "ApplicationDocument",
    "ApplicationNote",
    "ApplicationStage",
    "ApplicationStatus",
    "DocumentType",
    "Interview",
    "InterviewStatus",
    "InterviewType",
    "NoteSentiment",
    "NoteType",
    "NoteVisibility",
]
