"""Schemas for application documents."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import DocumentType


class DocumentCreate(BaseModel):
    """Metadata of an uploaded file; the binary lives in external storage."""

    document_type: DocumentType = DocumentType.CV
    file_url: str = Field(..., description="Location of the stored file")
    file_name: str | None = Field(default=None, max_length=255)
    file_type: str | None = Field(default=None, max_length=50)
    file_size: int | None = Field(default=None, ge=0)
    notes: str | None = None


class DocumentUpdate(BaseModel):
    """Partial update of document metadata."""

    file_name: str | None = Field(default=None, max_length=255)
    file_url: str | None = None
    notes: str | None = None


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    user_id: int
    document_type: DocumentType
    file_name: str | None = None
    file_url: str
    file_type: str | None = None
    file_size: int | None = None
    notes: str | None = None
    is_verified: bool
    verified_by: int | None = None
    verified_at: datetime | None = None
    uploaded_at: datetime


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int
    page: int
    limit: int
