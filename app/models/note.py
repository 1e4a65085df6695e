"""Collaboration note model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base
from app.models.application import _utc_now
from app.models.enums import NoteSentiment, NoteType, NoteVisibility, enum_column

if TYPE_CHECKING:
    from app.models.application import Application


class ApplicationNote(Base):
    """A note on an application, optionally scoped to one stage."""

    __tablename__ = "application_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("job_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage_id: Mapped[int | None] = mapped_column(
        ForeignKey("job_application_stages.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    note_type: Mapped[NoteType] = mapped_column(
        enum_column(NoteType), nullable=False, default=NoteType.INTERNAL
    )
    note_text: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[NoteVisibility] = mapped_column(
        enum_column(NoteVisibility, length=20),
        nullable=False,
        default=NoteVisibility.INTERNAL,
    )
    sentiment: Mapped[NoteSentiment] = mapped_column(
        enum_column(NoteSentiment, length=20),
        nullable=False,
        default=NoteSentiment.NEUTRAL,
    )
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

    application: Mapped[Application] = relationship(back_populates="notes")

    @property
    def is_public(self) -> bool:
        return self.visibility == NoteVisibility.PUBLIC

    def pin(self) -> None:
        self.is_pinned = True

    def unpin(self) -> None:
        self.is_pinned = False
