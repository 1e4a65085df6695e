"""Schemas for collaboration notes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import NoteSentiment, NoteType, NoteVisibility


class NoteCreate(BaseModel):
    """Request to add a note to an application."""

    application_id: int = Field(..., gt=0)
    stage_id: int | None = None
    note_type: NoteType = NoteType.INTERNAL
    note_text: str
    visibility: NoteVisibility = NoteVisibility.INTERNAL
    sentiment: NoteSentiment = NoteSentiment.NEUTRAL
    is_pinned: bool = False


class NoteUpdate(BaseModel):
    """Partial note update; unset fields are left untouched."""

    note_text: str | None = None
    note_type: NoteType | None = None
    visibility: NoteVisibility | None = None
    sentiment: NoteSentiment | None = None
    is_pinned: bool | None = None


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    stage_id: int | None = None
    author_id: int
    note_type: NoteType
    note_text: str
    visibility: NoteVisibility
    sentiment: NoteSentiment
    is_pinned: bool
    created_at: datetime
    updated_at: datetime
