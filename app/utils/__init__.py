"""Utility functions and classes."""

from app.utils.filters import ApplicationFilter
from app.utils.validators import (
    ValidationResult,
    as_naive_utc,
    validate_bulk_ids,
    validate_file_url,
    validate_note_text,
    validate_schedule_time,
    validate_score,
    validate_scores,
)

__all__ = [
    "ApplicationFilter",
    "ValidationResult",
    "as_naive_utc",
    "validate_bulk_ids",
    "validate_file_url",
    "validate_note_text",
    "validate_schedule_time",
    "validate_score",
    "validate_scores",
]
