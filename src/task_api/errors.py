"""Error taxonomy shared by the router and the storage backends.

Each error maps to exactly one HTTP status; the API layer renders every one
of them as a JSON body of the form ``{"message": "..."}``.
"""

from __future__ import annotations


class TaskApiError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(TaskApiError):
    """Malformed or missing caller input."""

    status_code = 400


class NotFoundError(TaskApiError):
    """No record matches the requested key."""

    status_code = 404


class MethodNotAllowed(TaskApiError):
    """The path exists but does not accept the request method."""

    status_code = 405


class RouteNotFound(TaskApiError):
    """No route matches the request path."""

    status_code = 404


class DecodeError(TaskApiError):
    """A stored record could not be mapped back to a Task."""

    status_code = 500


class InternalError(TaskApiError):
    """Backend or serialization failure."""

    status_code = 500
