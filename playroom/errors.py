from __future__ import annotations


class PlayroomError(ValueError):
    """Base class for request errors reported back to the caller via the ack."""


class ValidationError(PlayroomError):
    """Request payload is unusable (e.g. empty player name)."""


class NotFoundError(PlayroomError):
    """Unknown player id."""
