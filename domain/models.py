from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class GameType(Enum):
    """Kind of poker session. The values are the persisted form."""

    CASH_GAME = "Cash Game"
    TOURNAMENT = "Tournament"


@dataclass(frozen=True)
class PlayerResult:
    """One row of a game: how much a player won (positive) or lost."""

    name: str
    balance: float


@dataclass(frozen=True)
class Game:
    """
    A completed poker session.

    Games are immutable once recorded; editing a game replaces the whole
    record in the ledger while keeping its `id` and `date`.
    """

    id: int
    type: GameType
    date: str
    players: Tuple[PlayerResult, ...]
    total_value: float


@dataclass
class Player:
    """
    Aggregate statistics for one player across all recorded games.

    This is a derived view: it can always be rebuilt from the games.
    """

    name: str
    games: int
    balance: float


@dataclass
class GameDraft:
    """
    A game as entered by the user, before validation.

    `id` is set when the draft edits an existing game. Rows may include
    blank names, which are dropped when the draft is turned into a `Game`.
    """

    type: GameType
    players: List[PlayerResult] = field(default_factory=list)
    id: Optional[int] = None


def to_cents(amount: float) -> float:
    """Round a currency amount to cents, normalising -0.0 to 0.0."""

    return round(float(amount), 2) + 0.0
