"""Error kinds shared by every layer.

Each kind is a base class; concrete errors subclass one of them and the API
maps on the base class, so callers can always tell "wrong id" (NotFound) from
"pick another table" (Conflict).
"""

from __future__ import annotations

from typing import Any


class FloorServiceError(Exception):
    code = "ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class NotFoundError(FloorServiceError):
    code = "NOT_FOUND"


class ConflictError(FloorServiceError):
    code = "CONFLICT"


class InvalidInputError(FloorServiceError):
    code = "INVALID_INPUT"


class InvalidStateError(FloorServiceError):
    code = "INVALID_STATE"


class EmptyResultError(FloorServiceError):
    code = "NO_DATA"


class StoreUnavailableError(FloorServiceError):
    code = "STORE_UNAVAILABLE"


class DeadlineExceededError(StoreUnavailableError):
    code = "DEADLINE_EXCEEDED"


class AuthenticationError(FloorServiceError):
    code = "UNAUTHENTICATED"


class PermissionDeniedError(FloorServiceError):
    code = "FORBIDDEN"
