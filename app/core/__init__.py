"""Core application components."""

from app.core.config import settings
from app.core.exceptions import (
    ApplicationError,
    ConcurrencyError,
    DuplicateApplicationError,
    InvalidTransitionError,
    NotFoundError,
    OperationTimeoutError,
    PermissionDeniedError,
    RetryableError,
    ValidationError,
)
from app.core.storage import Base, async_session, init_models

__all__ = [
    "ApplicationError",
    "Base",
    "ConcurrencyError",
    "DuplicateApplicationError",
    "InvalidTransitionError",
    "NotFoundError",
    "OperationTimeoutError",
    "PermissionDeniedError",
    "RetryableError",
    "ValidationError",
    "async_session",
    "init_models",
    "settings",
]
