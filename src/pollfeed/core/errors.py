"""Domain exceptions raised by the Pollfeed service layer.

Every exception carries the message returned to API clients and the HTTP
status the API layer maps it to. Transient storage failures are not part of
this hierarchy: SQLAlchemy connection and timeout errors propagate unchanged
so callers can distinguish them from rejected requests.
"""

from __future__ import annotations

from fastapi import status


class PollFeedError(Exception):
    """Base exception for expected, client-visible failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(PollFeedError):
    """Raised when a referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PostNotFoundError(NotFoundError):
    """Raised when a post identifier does not resolve to a post."""

    default_message = "Post not found"


class UserNotFoundError(NotFoundError):
    """Raised when a user identifier does not resolve to a user."""

    default_message = "User not found"


class ConflictError(PollFeedError):
    """Raised when a request conflicts with the current state of a record."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class AlreadyVotedError(ConflictError):
    """Raised when a user votes a second time on the same post."""

    default_message = "Already voted"


class ValidationError(PollFeedError):
    """Raised when input is rejected before any state is mutated."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidOptionError(ValidationError):
    """Raised when a vote references an option index the post does not have."""

    default_message = "Invalid option index"


class InvalidEngagementStateError(ValidationError):
    """Raised when a post's counters or timestamp cannot be scored."""

    default_message = "Invalid engagement state"


class ForbiddenError(PollFeedError):
    """Raised when the caller may not act on the target record."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"
