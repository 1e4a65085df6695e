"""Collaboration notes on applications."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models import (
    ApplicationNote,
    NoteSentiment,
    NoteType,
    NoteVisibility,
)
from app.schemas.note import NoteCreate, NoteUpdate
from app.services.application_store import ApplicationStore
from app.utils.validators import validate_note_text

logger = logging.getLogger(__name__)


class NoteLedger:
    """CRUD over notes, optionally scoped to a stage of the application."""

    def __init__(self, store: ApplicationStore):
        self.store = store

    async def add_note(self, data: NoteCreate, author_id: int) -> ApplicationNote:
        async with self.store.transaction() as session:
            note = await self.write_note(
                session,
                application_id=data.application_id,
                author_id=author_id,
                note_text=data.note_text,
                note_type=data.note_type,
                visibility=data.visibility,
                sentiment=data.sentiment,
                stage_id=data.stage_id,
                is_pinned=data.is_pinned,
            )
        logger.info(
            f"Note {note.id} ({note.note_type.value}) added to application "
            f"{note.application_id} by {author_id}"
        )
        return note

    async def write_note(
        self,
        session: AsyncSession,
        application_id: int,
        author_id: int,
        note_text: str,
        note_type: NoteType = NoteType.INTERNAL,
        visibility: NoteVisibility = NoteVisibility.INTERNAL,
        sentiment: NoteSentiment = NoteSentiment.NEUTRAL,
        stage_id: int | None = None,
        is_pinned: bool = False,
    ) -> ApplicationNote:
        """Insert a note within the caller's unit of work."""
        check = validate_note_text(note_text)
        if not check.is_valid:
            raise ValidationError(check.error)

        await self.store.get_application(session, application_id)
        if stage_id is not None:
            await self._check_stage(session, application_id, stage_id)

        note = ApplicationNote(
            application_id=application_id,
            stage_id=stage_id,
            author_id=author_id,
            note_type=NoteType(note_type),
            note_text=note_text.strip(),
            visibility=NoteVisibility(visibility),
            sentiment=NoteSentiment(sentiment),
            is_pinned=is_pinned,
        )
        return await self.store.add(session, note)

    async def _check_stage(
        self, session: AsyncSession, application_id: int, stage_id: int
    ) -> None:
        stage = await self.store.get_stage(session, stage_id)
        if stage.application_id != application_id:
            raise NotFoundError(f"Stage of application {application_id}", stage_id)

    async def get_note(self, note_id: int) -> ApplicationNote:
        async with self.store.reader() as session:
            return await self.store.get_note(session, note_id)

    async def update_note(self, note_id: int, data: NoteUpdate) -> ApplicationNote:
        """Apply the fields that were set on ``data``."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "note_text" in changes:
            check = validate_note_text(changes["note_text"])
            if not check.is_valid:
                raise ValidationError(check.error)
            changes["note_text"] = changes["note_text"].strip()

        async with self.store.transaction() as session:
            note = await self.store.get_note(session, note_id, lock=True)
            for field, value in changes.items():
                setattr(note, field, value)
            await session.flush()
        return note

    async def delete_note(self, note_id: int, actor_id: int) -> None:
        """Delete a note; only its author may do so."""
        async with self.store.transaction() as session:
            note = await self.store.get_note(session, note_id, lock=True)
            if note.author_id != actor_id:
                raise PermissionDeniedError(
                    f"Only the author can delete note {note_id}"
                )
            await self.store.delete(session, note)
        logger.info(f"Note {note_id} deleted by {actor_id}")

    async def pin(self, note_id: int) -> ApplicationNote:
        return await self._set_pinned(note_id, True)

    async def unpin(self, note_id: int) -> ApplicationNote:
        return await self._set_pinned(note_id, False)

    async def _set_pinned(self, note_id: int, pinned: bool) -> ApplicationNote:
        async with self.store.transaction() as session:
            note = await self.store.get_note(session, note_id, lock=True)
            if note.is_pinned != pinned:
                if pinned:
                    note.pin()
                else:
                    note.unpin()
                await session.flush()
        return note

    async def list_for_application(
        self, application_id: int, visibility: NoteVisibility | None = None
    ) -> list[ApplicationNote]:
        """Notes of an application, pinned first, newest first."""
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            return await self.store.list_notes(
                session, application_id=application_id, visibility=visibility
            )

    async def list_for_stage(self, stage_id: int) -> list[ApplicationNote]:
        async with self.store.reader() as session:
            await self.store.get_stage(session, stage_id)
            return await self.store.list_notes(session, stage_id=stage_id)

    async def list_pinned(self, application_id: int) -> list[ApplicationNote]:
        async with self.store.reader() as session:
            await self.store.get_application(session, application_id)
            return await self.store.list_notes(
                session, application_id=application_id, pinned_only=True
            )
