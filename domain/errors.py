from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors raised by the tracker's domain layer."""


class ValidationError(TrackerError):
    """
    A game draft was rejected.

    Raised before any state is touched, so the ledger and the roster are
    unchanged and the caller can let the user correct the draft.
    """


class NotFoundError(TrackerError):
    """No game with the requested id is stored."""

    def __init__(self, game_id: int) -> None:
        super().__init__(f"Game {game_id} not found.")
        self.game_id = game_id


class SerializationError(TrackerError):
    """Persisted state could not be decoded."""
