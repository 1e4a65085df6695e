"""Closed enumerations shared by the lifecycle engine.

``ApplicationStatus`` is used both as ``Application.status`` and as
``ApplicationStage.stage_name``, so the legal-edge table below is the only
place the hiring graph is defined.
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum


class ApplicationStatus(str, Enum):
    """Hiring pipeline position of an application."""

    APPLIED = "applied"
    SCREENING = "screening"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def funnel_rank(self) -> int | None:
        """Position in the funnel order, or None for rejected/withdrawn."""
        try:
            return FUNNEL_ORDER.index(self)
        except ValueError:
            return None


FUNNEL_ORDER: tuple[ApplicationStatus, ...] = (
    ApplicationStatus.APPLIED,
    ApplicationStatus.SCREENING,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.OFFERED,
    ApplicationStatus.HIRED,
)

TERMINAL_STATUSES: frozenset[ApplicationStatus] = frozenset(
    {
        ApplicationStatus.HIRED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    }
)


def _build_transitions() -> dict[ApplicationStatus, frozenset[ApplicationStatus]]:
    edges: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {}
    for current, following in zip(FUNNEL_ORDER, FUNNEL_ORDER[1:]):
        edges[current] = frozenset(
            {following, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}
        )
    for terminal in TERMINAL_STATUSES:
        edges[terminal] = frozenset()
    return edges


LEGAL_TRANSITIONS = _build_transitions()


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    """Return True when ``target`` is reachable from ``current`` in one step."""
    return target in LEGAL_TRANSITIONS[ApplicationStatus(current)]


class InterviewType(str, Enum):
    ONLINE = "online"
    ONSITE = "onsite"
    HYBRID = "hybrid"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self in (
            InterviewStatus.COMPLETED,
            InterviewStatus.CANCELLED,
            InterviewStatus.NO_SHOW,
        )


class NoteType(str, Enum):
    EVALUATION = "evaluation"
    FEEDBACK = "feedback"
    REMINDER = "reminder"
    INTERNAL = "internal"


class NoteVisibility(str, Enum):
    INTERNAL = "internal"
    PUBLIC = "public"


class NoteSentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class DocumentType(str, Enum):
    CV = "cv"
    COVER_LETTER = "cover_letter"
    PORTFOLIO = "portfolio"
    CERTIFICATE = "certificate"
    TRANSCRIPT = "transcript"
    OTHER = "other"


def enum_column(enum_cls: type[Enum], length: int = 30) -> SAEnum:
    """Column type persisting an enum by value in a plain VARCHAR."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        validate_strings=True,
        values_callable=lambda members: [member.value for member in members],
    )
