from __future__ import annotations

from typing import Any

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class GeoMapClientError(Exception):
    """Base client error.

    Every failure leaving the client carries the same shape: ``status``
    (0 when no response was received), a non-empty ``message`` and the
    optional decoded response body in ``data``.
    """

    def __init__(self, status: int, message: str, data: Any | None = None):
        message = message or UNEXPECTED_ERROR_MESSAGE
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "message": self.message, "data": self.data}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class ApiError(GeoMapClientError):
    """The server answered with a non-2xx status."""


class AuthError(ApiError):
    """Auth-related API error (401/403)."""


class NetworkError(GeoMapClientError):
    """Request was sent but no response came back (timeout, connection failure)."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        super().__init__(0, message)


class RequestBuildError(GeoMapClientError):
    """Request could not be built or dispatched at all."""

    def __init__(self, message: str):
        super().__init__(0, message)
