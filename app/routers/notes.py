"""API routes for collaboration notes."""

from fastapi import APIRouter, Depends, status

from app.models import NoteVisibility
from app.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from app.services.dependencies import get_note_ledger, require_actor
from app.services.note_ledger import NoteLedger

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    request: NoteCreate,
    ledger: NoteLedger = Depends(get_note_ledger),
    author_id: int = Depends(require_actor),
):
    return await ledger.add_note(request, author_id)


@router.get("/application/{application_id}", response_model=list[NoteResponse])
async def list_for_application(
    application_id: int,
    visibility: NoteVisibility | None = None,
    ledger: NoteLedger = Depends(get_note_ledger),
):
    """Notes of an application, optionally restricted to one visibility."""
    return await ledger.list_for_application(application_id, visibility)


@router.get("/application/{application_id}/pinned", response_model=list[NoteResponse])
async def list_pinned(
    application_id: int,
    ledger: NoteLedger = Depends(get_note_ledger),
):
    return await ledger.list_pinned(application_id)


@router.get("/stage/{stage_id}", response_model=list[NoteResponse])
async def list_for_stage(
    stage_id: int,
    ledger: NoteLedger = Depends(get_note_ledger),
):
    return await ledger.list_for_stage(stage_id)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(note_id: int, ledger: NoteLedger = Depends(get_note_ledger)):
    return await ledger.get_note(note_id)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    request: NoteUpdate,
    ledger: NoteLedger = Depends(get_note_ledger),
):
    return await ledger.update_note(note_id, request)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: int,
    ledger: NoteLedger = Depends(get_note_ledger),
    actor_id: int = Depends(require_actor),
):
    await ledger.delete_note(note_id, actor_id)


@router.post("/{note_id}/pin", response_model=NoteResponse)
async def pin_note(note_id: int, ledger: NoteLedger = Depends(get_note_ledger)):
    return await ledger.pin(note_id)


@router.post("/{note_id}/unpin", response_model=NoteResponse)
async def unpin_note(note_id: int, ledger: NoteLedger = Depends(get_note_ledger)):
    return await ledger.unpin(note_id)
