"""API routes for application documents."""

from fastapi import APIRouter, Depends, Query, status

from app.models import DocumentType
from app.schemas.document import (
    DocumentCreate,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
)
from app.services.dependencies import get_document_service, require_actor
from app.services.document_service import DocumentService

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post(
    "/application/{application_id}",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    application_id: int,
    request: DocumentCreate,
    service: DocumentService = Depends(get_document_service),
    user_id: int = Depends(require_actor),
):
    """Register an uploaded file for an application."""
    return await service.upload(application_id, request, user_id)


@router.get("/application/{application_id}", response_model=list[DocumentResponse])
async def list_for_application(
    application_id: int,
    document_type: DocumentType | None = None,
    service: DocumentService = Depends(get_document_service),
):
    return await service.list_for_application(application_id, document_type)


@router.get("/unverified", response_model=DocumentListResponse)
async def list_unverified(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    service: DocumentService = Depends(get_document_service),
):
    documents, total, page, limit = await service.list_unverified(page, limit)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service),
):
    return await service.get_document(document_id)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: int,
    request: DocumentUpdate,
    service: DocumentService = Depends(get_document_service),
):
    return await service.update(document_id, request)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service),
    user_id: int = Depends(require_actor),
):
    await service.delete(document_id, user_id)


@router.post("/{document_id}/verify", response_model=DocumentResponse)
async def verify_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service),
    verifier_id: int = Depends(require_actor),
):
    return await service.verify(document_id, verifier_id)
