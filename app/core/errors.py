"""Domain error taxonomy.

Services raise these; app/api/errors.py turns them into HTTP responses.
None of them is worth retrying: each describes a terminal business
condition for the request that raised it.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors the transport layer knows how to render."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """A referenced course, topic or enrollment does not exist."""

    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class AlreadyEnrolledError(ConflictError):
    def __init__(self, message: str = "Already enrolled in this course") -> None:
        super().__init__(message)


class AuthorizationError(DomainError):
    """The actor is neither the resource owner nor an admin."""

    status_code = 403


class DuplicateKeyError(ValueError):
    """Raised by repos when an insert violates a uniqueness constraint."""


class InvalidPatchError(DomainError):
    """A partial update names a field that cannot take the given value."""

    status_code = 422
