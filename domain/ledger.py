from __future__ import annotations

import math
import time
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from .errors import NotFoundError, ValidationError
from .models import Game, GameDraft, GameType, Player, PlayerResult, to_cents
from .stats import StatsAggregator

# Player balances of a game must net to zero; this absorbs float noise.
CHECKSUM_EPSILON = 0.01

# Largest balance a row may carry; keeps cent arithmetic exact in floats.
MAX_BALANCE = 1e12


def _now_ms() -> int:
    return int(time.time() * 1000)


def _today() -> str:
    return date.today().isoformat()


def checksum(players: Iterable[PlayerResult]) -> float:
    """Net sum of the balances; zero for a settled game."""

    return to_cents(sum(p.balance for p in players))


def total_value(players: Iterable[PlayerResult]) -> float:
    """Money that changed hands: half the sum of absolute balances."""

    return to_cents(sum(abs(p.balance) for p in players) / 2)


def normalize_players(rows: Iterable[PlayerResult]) -> Tuple[PlayerResult, ...]:
    """
    Clean up the rows of a draft.

    Names are stripped and balances rounded to cents. Blank rows are dropped
    as long as they carry no money. Raises `ValidationError` for a balance
    that is not a finite number or exceeds `MAX_BALANCE`, a balance without
    a name, duplicate names, or a game with no players left.

    Rounding happens row by row before the checksum is taken, so the checksum
    sees the amounts that will be stored: rows like 0.004999, 0.004999 and
    -0.009998 round to 0, 0 and -0.01 and are rejected even though their raw
    sum is within a cent of zero.
    """

    players: List[PlayerResult] = []
    seen = set()
    for row in rows:
        name = (row.name or "").strip()
        raw = float(row.balance or 0)
        if not math.isfinite(raw) or abs(raw) > MAX_BALANCE:
            raise ValidationError(f"Balance for {name or 'a blank row'} must be a finite number.")
        balance = to_cents(raw)
        if not name:
            if balance != 0:
                raise ValidationError(f"A balance of {balance:g} has no player name.")
            continue
        if name in seen:
            raise ValidationError(f"Player {name} appears more than once.")
        seen.add(name)
        players.append(PlayerResult(name=name, balance=balance))

    if not players:
        raise ValidationError("A game needs at least one player.")
    return tuple(players)


def build_game(draft: GameDraft, game_id: int, game_date: str) -> Game:
    """Validate `draft` and turn it into a `Game` with the given identity."""

    if not isinstance(draft.type, GameType):
        raise ValidationError(f"Unknown game type: {draft.type!r}")

    players = normalize_players(draft.players)
    net = checksum(players)
    if abs(net) >= CHECKSUM_EPSILON:
        raise ValidationError(f"The total balance must equal zero (off by {net:g}).")

    return Game(
        id=game_id,
        type=draft.type,
        date=game_date,
        players=players,
        total_value=total_value(players),
    )


class Ledger:
    """
    Ordered history of recorded games, most recent first.

    The ledger is the source of truth. Every mutation is reported to the
    `StatsAggregator` so the player roster follows along. Drafts are fully
    validated before anything is changed.
    """

    def __init__(
        self,
        stats: StatsAggregator,
        games: Iterable[Game] = (),
        clock: Callable[[], int] = _now_ms,
        today: Callable[[], str] = _today,
    ) -> None:
        self._stats = stats
        self._games: List[Game] = list(games)
        self._clock = clock
        self._today = today

    @property
    def games(self) -> Tuple[Game, ...]:
        return tuple(self._games)

    def contains(self, game_id: int) -> bool:
        return self._index_of(game_id) is not None

    def _index_of(self, game_id: int) -> Optional[int]:
        for index, game in enumerate(self._games):
            if game.id == game_id:
                return index
        return None

    def _require_index(self, game_id: int) -> int:
        index = self._index_of(game_id)
        if index is None:
            raise NotFoundError(game_id)
        return index

    def _new_id(self, requested: Optional[int]) -> int:
        game_id = requested if requested is not None else self._clock()
        while self.contains(game_id):
            game_id += 1
        return game_id

    def get_game(self, game_id: int) -> Game:
        return self._games[self._require_index(game_id)]

    def add_game(self, draft: GameDraft) -> Game:
        """Validate and record a new game at the front of the ledger."""

        game = build_game(draft, self._new_id(draft.id), self._today())
        self._games.insert(0, game)
        self._stats.game_added(game)
        return game

    def update_game(self, game_id: int, draft: GameDraft) -> Game:
        """
        Replace a stored game in place, keeping its id and date.

        The old game's effect is removed from the stats before the new one is
        applied; the two versions may involve different players.
        """

        index = self._require_index(game_id)
        old = self._games[index]
        new = build_game(draft, old.id, old.date)

        self._games[index] = new
        self._stats.game_replaced(old, new)
        return new

    def delete_game(self, game_id: int) -> Game:
        index = self._require_index(game_id)
        game = self._games.pop(index)
        self._stats.game_removed(game)
        return game

    def list_games(self, game_type: Optional[GameType] = None) -> List[Game]:
        if game_type is None:
            return list(self._games)
        return [g for g in self._games if g.type is game_type]

    def players(self) -> List[Player]:
        """Current roster, in insertion order."""

        return self._stats.players(self.games)
