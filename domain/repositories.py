from __future__ import annotations

from typing import Optional, Protocol

GAMES_KEY = "games"
PLAYERS_KEY = "players"


class StateStore(Protocol):
    """
    Abstraction over the key-value store holding the tracker's state.

    Implementations are responsible for:
    - Storing opaque serialized values under string keys.
    - Hiding any SQL / driver details from the application layer.

    The application writes a full snapshot of each collection after every
    mutation, so a store never needs to merge or append.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`, or None if absent."""

        ...

    def put(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

        ...
