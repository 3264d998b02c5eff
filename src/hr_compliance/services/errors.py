"""Service-layer exceptions translated to HTTP responses by the API."""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for domain errors raised by services."""

    status_code = 400
    headers: dict[str, str] | None = None

    def __init__(self, message: str, **extra: Any):
        self.message = message
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Response body for this error."""
        return {"error": self.message, **self.extra}


class NotFoundError(ServiceError):
    """Raised when a record does not exist."""

    status_code = 404

    def __init__(self, entity: str, record_id: Any = None):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} not found")


class ConflictError(ServiceError):
    """Raised when a write would break a uniqueness or reference rule."""

    status_code = 409


class InvalidOperationError(ServiceError):
    """Raised when an operation is not allowed in the record's current state."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Raised when credentials are missing or invalid."""

    status_code = 401


class PermissionDeniedError(ServiceError):
    """Raised when an identity lacks a required permission or role."""

    status_code = 403


class RateLimitExceededError(ServiceError):
    """Raised when an API key has spent its hourly quota."""

    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded", retry_after=retry_after)

    @property
    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.retry_after)}
