"""Custom exceptions for the hiring lifecycle engine."""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ApplicationError(Exception):
    """Base exception for lifecycle errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int | None = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {entity_id} not found")


class InvalidTransitionError(ApplicationError):
    """Raised when a status or interview edge is not permitted."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str, detail: str | None = None):
        self.current = current
        self.target = target
        message = f"Cannot move from '{current}' to '{target}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DuplicateApplicationError(ApplicationError):
    """Raised when a user applies twice to the same job."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, job_id: int, user_id: int):
        self.job_id = job_id
        self.user_id = user_id
        super().__init__(f"User {user_id} already applied to job {job_id}")


class ValidationError(ApplicationError):
    """Raised when input fails a domain rule (score range, empty text, past time)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PermissionDeniedError(ApplicationError):
    """Raised when the actor is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class RetryableError(ApplicationError):
    """Transient persistence failure; the caller may retry with backoff."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


class ConcurrencyError(RetryableError):
    """Raised when a concurrent writer won the race for the same row."""


class OperationTimeoutError(RetryableError):
    """Raised when an atomic unit did not finish within its deadline."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT


async def application_error_handler(
    request: Request, exc: ApplicationError
) -> JSONResponse:
    """Render lifecycle errors as JSON responses."""
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "detail": exc.message,
            "retryable": exc.retryable,
        },
        headers=headers,
    )


def unauthorized_exception(detail: str = "Not authenticated") -> HTTPException:
    """Return a 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
