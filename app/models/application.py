"""Job application, stage history and document models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base
from app.models.enums import (
    ApplicationStatus,
    DocumentType,
    enum_column,
)

if TYPE_CHECKING:
    from app.models.interview import Interview
    from app.models.note import ApplicationNote


def _utc_now() -> datetime:
    """Return current UTC time as timezone-naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class Application(Base):
    """A candidate's application to one job."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_job_applications_job_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    company_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    status: Mapped[ApplicationStatus] = mapped_column(
        enum_column(ApplicationStatus),
        nullable=False,
        default=ApplicationStatus.APPLIED,
        index=True,
    )
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="job_portal")
    match_score: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=False, default=0.0
    )
    resume_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)

    viewed_by_employer: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    is_bookmarked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    applied_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    stages: Mapped[list[ApplicationStage]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApplicationStage.started_at",
    )
    documents: Mapped[list[ApplicationDocument]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notes: Mapped[list[ApplicationNote]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    interviews: Mapped[list[Interview]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_terminal(self) -> bool:
        return ApplicationStatus(self.status).is_terminal

    @property
    def is_in_progress(self) -> bool:
        return self.status in (
            ApplicationStatus.SCREENING,
            ApplicationStatus.SHORTLISTED,
            ApplicationStatus.INTERVIEW,
            ApplicationStatus.OFFERED,
        )

    def can_withdraw(self) -> bool:
        """Withdrawal is possible until the application reaches a final status."""
        return not self.is_terminal

    def is_owner(self, user_id: int | None) -> bool:
        return user_id is not None and self.user_id == user_id

    def days_since_applied(self, now: datetime | None = None) -> int:
        return ((now or _utc_now()) - self.applied_at).days


class ApplicationStage(Base):
    """One time-bounded entry of an application's stage history."""

    __tablename__ = "job_application_stages"
    __table_args__ = (
        # At most one open stage per application.
        Index(
            "uq_job_application_stages_open",
            "application_id",
            unique=True,
            postgresql_where=text("completed_at IS NULL"),
            sqlite_where=text("completed_at IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("job_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage_name: Mapped[ApplicationStatus] = mapped_column(
        enum_column(ApplicationStatus, length=50), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    handled_by: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

    application: Mapped[Application] = relationship(back_populates="stages")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def duration(self) -> timedelta | None:
        """Time spent in the stage, available once it is closed."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    @property
    def duration_days(self) -> int | None:
        duration = self.duration
        return None if duration is None else duration.days

    def complete(self, at: datetime | None = None, notes: str | None = None) -> None:
        """Close the stage, never earlier than it started."""
        completed_at = at or _utc_now()
        self.completed_at = max(completed_at, self.started_at)
        if notes:
            self.notes = f"{self.notes}\n{notes}" if self.notes else notes


class ApplicationDocument(Base):
    """Metadata of a file attached to an application."""

    __tablename__ = "application_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("job_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    document_type: Mapped[DocumentType] = mapped_column(
        enum_column(DocumentType, length=50),
        nullable=False,
        default=DocumentType.CV,
    )
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    verified_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

    application: Mapped[Application] = relationship(back_populates="documents")

    def verify(self, verifier_id: int, at: datetime | None = None) -> None:
        self.is_verified = True
        self.verified_by = verifier_id
        self.verified_at = at or _utc_now()
