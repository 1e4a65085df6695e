"""Interview model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base
from app.models.application import _utc_now
from app.models.enums import InterviewStatus, InterviewType, enum_column

if TYPE_CHECKING:
    from app.models.application import Application


class Interview(Base):
    """An interview held for an application, optionally bound to a stage."""

    __tablename__ = "interviews"

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
    interviewer_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )

    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    interview_type: Mapped[InterviewType] = mapped_column(
        enum_column(InterviewType, length=20),
        nullable=False,
        default=InterviewType.ONLINE,
    )
    meeting_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[InterviewStatus] = mapped_column(
        enum_column(InterviewStatus, length=20),
        nullable=False,
        default=InterviewStatus.SCHEDULED,
        index=True,
    )

    # Evaluation, only populated on completion
    overall_score: Mapped[float | None] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=True
    )
    technical_score: Mapped[float | None] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=True
    )
    communication_score: Mapped[float | None] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=True
    )
    personality_score: Mapped[float | None] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=True
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    feedback_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    reschedule_reasons: Mapped[str | None] = mapped_column(Text, nullable=True)
    reminder_sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )

    application: Mapped[Application] = relationship(back_populates="interviews")

    @property
    def is_terminal(self) -> bool:
        return InterviewStatus(self.status).is_terminal

    def has_scores(self) -> bool:
        return any(
            score is not None
            for score in (
                self.overall_score,
                self.technical_score,
                self.communication_score,
                self.personality_score,
            )
        )

    def calculate_average_score(self) -> float:
        """Mean of the technical, communication and personality scores present.

        The overall score is not part of the average.
        """
        # TODO: confirm with product whether overall_score should join the mean.
        present = [
            score
            for score in (
                self.technical_score,
                self.communication_score,
                self.personality_score,
            )
            if score is not None
        ]
        if not present:
            return 0.0
        return sum(present) / len(present)

    def append_reschedule_reason(self, reason: str, at: datetime) -> None:
        entry = f"[{at.isoformat(timespec='minutes')}] {reason}"
        if self.reschedule_reasons:
            self.reschedule_reasons = f"{self.reschedule_reasons}\n{entry}"
        else:
            self.reschedule_reasons = entry
