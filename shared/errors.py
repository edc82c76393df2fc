"""
Client-facing error taxonomy.

Every failure a route can report is one of these exceptions. The Request Pipeline
turns them into JSON error responses using `http_status`.
"""

from typing import Dict, List, Optional


class ServiceError(Exception):
    """Base class for errors that are reported to the caller."""

    http_status = 500
    kind = "internal"

    def __init__(self, message: str, errors: Optional[List[Dict]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class UnauthorizedError(ServiceError):
    """Raised when authentication fails."""

    http_status = 401
    kind = "unauthenticated"


class ForbiddenError(ServiceError):
    """Raised when a user doesn't have permission to access a resource."""

    http_status = 403
    kind = "forbidden"


class NotFoundError(ServiceError):
    """Raised when a resource is not found."""

    http_status = 404
    kind = "not_found"


class InvalidInputError(ServiceError):
    """Raised when the request body or query string fails validation."""

    http_status = 422
    kind = "invalid_input"


class MalformedBodyError(InvalidInputError):
    """Raised when the request body is not valid JSON."""

    http_status = 400


class ConflictError(ServiceError):
    """Raised when the backing platform reports a uniqueness violation."""

    http_status = 409
    kind = "conflict"


class InternalError(ServiceError):
    """Raised for programmer errors and impossible states."""


class RemoteOperationFailed(ServiceError):
    """
    Raised when a call to the identity provider, data API or object store fails.

    `status_code` is the remote HTTP status (None when no response arrived) and
    `raw_message` the remote response text, kept verbatim for substring checks.
    """

    kind = "remote_operation_failed"

    def __init__(self, status_code: Optional[int], raw_message: str):
        super().__init__(raw_message or f"HTTP {status_code}")
        self.status_code = status_code
        self.raw_message = raw_message

    @property
    def http_status(self) -> int:
        if self.status_code is None:
            return 504
        if 400 <= self.status_code < 500:
            return 400
        return 502
