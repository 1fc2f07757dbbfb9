"""Error taxonomy shared by services, repositories and the HTTP layer."""

from __future__ import annotations


class LMSError(Exception):
    """Base exception for all domain errors."""

    public_message = "Internal server error"


class NotFoundError(LMSError):
    """Raised when a referenced course, lesson, certificate or user does not exist."""

    public_message = "Not found"


class InvalidInputError(LMSError):
    """Raised when identifiers are malformed or required fields are missing."""

    public_message = "Invalid input"


class UnauthorizedError(LMSError):
    """Raised when a valid session is required but absent."""

    public_message = "Authentication required"


class InvalidCredentialsError(UnauthorizedError):
    """Raised when login credentials are invalid.

    Unknown usernames and wrong passwords both raise this with the same
    message so callers cannot enumerate accounts.
    """

    public_message = "Invalid username or password"

    def __init__(self) -> None:
        super().__init__(self.public_message)


class ForbiddenError(LMSError):
    """Raised when the session is valid but the role is insufficient."""

    public_message = "Forbidden"


class ConflictError(LMSError):
    """Raised on a duplicate insert into a uniquely constrained column."""

    public_message = "Conflict"


class StorageError(LMSError):
    """Raised for any other persistence-layer failure."""
