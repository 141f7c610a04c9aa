"""Error taxonomy shared by the voting, ranking and comment services."""

from __future__ import annotations


class RankingError(RuntimeError):
    """Base exception raised by the voting and comment services.

    Endpoints translate subclasses into HTTP errors; nothing else in the
    core needs to know about HTTP.
    """


class UnauthorizedError(RankingError):
    """Raised when a ban or missing permission forbids the action."""


class ConflictError(RankingError):
    """Raised when the caller's view of its own vote is stale.

    The client should refresh the content and retry with the vote it now
    observes.
    """


class NotFoundError(RankingError):
    """Raised when the targeted content does not exist or is hidden."""


class InternalError(RankingError):
    """Raised when storage fails underneath a ranking operation."""
