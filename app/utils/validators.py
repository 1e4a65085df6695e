"""Validation logic for lifecycle inputs."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

MIN_SCORE = 0.0
MAX_SCORE = 100.0


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


def validate_score(name: str, value: float | None) -> ValidationResult:
    """Check that an optional score lies in [0, 100]."""
    if value is None:
        return ValidationResult(is_valid=True)
    if not MIN_SCORE <= value <= MAX_SCORE:
        return ValidationResult(
            is_valid=False,
            error=f"{name} must be between {MIN_SCORE:g} and {MAX_SCORE:g}, got {value:g}",
        )
    return ValidationResult(is_valid=True)


def validate_scores(scores: dict[str, float | None]) -> ValidationResult:
    """Validate every score of an evaluation; the first failure wins."""
    for name, value in scores.items():
        result = validate_score(name, value)
        if not result.is_valid:
            return result
    return ValidationResult(is_valid=True)


def validate_schedule_time(
    scheduled_at: datetime,
    now: datetime,
    grace: timedelta = timedelta(0),
) -> ValidationResult:
    """Reject interview times in the past, allowing ``grace`` of clock skew."""
    if scheduled_at <= now - grace:
        return ValidationResult(
            is_valid=False,
            error=f"Interview time {scheduled_at.isoformat()} is in the past",
        )
    warnings = []
    if scheduled_at - now < timedelta(hours=1):
        warnings.append("Interview starts in less than an hour")
    return ValidationResult(is_valid=True, warnings=warnings)


def validate_note_text(text: str | None) -> ValidationResult:
    if text is None or not text.strip():
        return ValidationResult(is_valid=False, error="Note text must not be empty")
    return ValidationResult(is_valid=True)


def validate_file_url(url: str | None) -> ValidationResult:
    if url is None or not url.strip():
        return ValidationResult(is_valid=False, error="Document file_url is required")
    return ValidationResult(is_valid=True)


def validate_bulk_ids(application_ids: list[int], limit: int = 500) -> ValidationResult:
    """Validate the size of a bulk request."""
    if not application_ids:
        return ValidationResult(is_valid=False, error="No application IDs given")
    if len(application_ids) > limit:
        return ValidationResult(
            is_valid=False,
            error=f"Cannot process more than {limit} applications at once",
        )
    if len(set(application_ids)) != len(application_ids):
        return ValidationResult(
            is_valid=True, warnings=["Duplicate application IDs were given"]
        )
    return ValidationResult(is_valid=True)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to the naive UTC form stored in the database."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
