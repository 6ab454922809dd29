from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .models import Game, Player, to_cents

Roster = Dict[str, Player]


class SortKey(Enum):
    NAME = "name"
    GAMES = "games"
    BALANCE = "balance"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


def apply_delta(roster: Roster, game: Game, sign: int, prune: bool = True) -> None:
    """
    Add (`sign=+1`) or remove (`sign=-1`) the effect of one game on `roster`.

    The roster is modified in place. Players whose game count drops to zero
    are removed unless `prune` is false; removing a game for a player who is
    not in the roster is ignored, so counts can never go negative.
    """

    if sign not in (1, -1):
        raise ValueError(f"sign must be +1 or -1, got {sign!r}")

    for result in game.players:
        player = roster.get(result.name)
        if player is None:
            if sign > 0:
                roster[result.name] = Player(
                    name=result.name,
                    games=1,
                    balance=to_cents(result.balance),
                )
            continue

        player.games += sign
        player.balance = to_cents(player.balance + sign * result.balance)
        if prune and player.games <= 0:
            del roster[result.name]


def prune_roster(roster: Roster) -> None:
    """Drop players left without any game."""

    for name in [n for n, p in roster.items() if p.games <= 0]:
        del roster[name]


def recompute_roster(games: Iterable[Game]) -> Roster:
    """
    Build a roster from scratch.

    `games` is in ledger order (most recent first), so it is replayed in
    reverse to create players in the order they first appeared.
    """

    roster: Roster = {}
    for game in reversed(list(games)):
        apply_delta(roster, game, +1)
    return roster


def roster_snapshot(players: Iterable[Player]) -> Dict[str, tuple]:
    """Order-insensitive view of a roster, used to compare two rosters."""

    return {p.name: (p.games, p.balance) for p in players}


def sort_roster(
    players: Iterable[Player],
    sort_key: SortKey = SortKey.BALANCE,
    order: SortOrder = SortOrder.DESC,
) -> List[Player]:
    """Sort players; ties keep their roster order."""

    if sort_key is SortKey.NAME:
        key = lambda p: p.name.casefold()  # noqa: E731
    elif sort_key is SortKey.GAMES:
        key = lambda p: p.games  # noqa: E731
    else:
        key = lambda p: p.balance  # noqa: E731

    # `sorted` is stable for reverse=True as well.
    return sorted(players, key=key, reverse=order is SortOrder.DESC)


class StatsAggregator(Protocol):
    """
    Keeps per-player statistics in line with the ledger.

    The ledger reports every mutation through `game_added`, `game_removed`
    or `game_replaced` and hands its current games to `players` on reads, so
    an implementation may either keep a running roster or recompute one on
    demand.

    Implementations agree on every player's `games` and `balance`, but not
    necessarily on roster order. `IncrementalStats` keeps the order in which
    players joined the running roster; `ReplayStats` uses the order of first
    appearance among the surviving games. After a delete or an edit the two
    can differ, and because `sort_roster` breaks ties by roster order, tied
    players may be listed differently depending on the strategy in use.
    """

    def game_added(self, game: Game) -> None:
        ...

    def game_removed(self, game: Game) -> None:
        ...

    def game_replaced(self, old: Game, new: Game) -> None:
        """Remove `old`, then apply `new`, as one edit."""

        ...

    def players(self, games: Sequence[Game]) -> List[Player]:
        """Return the current roster in insertion order."""

        ...


class IncrementalStats(StatsAggregator):
    """Running roster updated by per-game deltas."""

    def __init__(self, players: Optional[Iterable[Player]] = None) -> None:
        self._roster: Roster = {}
        for p in players or ():
            if p.games > 0:
                self._roster[p.name] = Player(p.name, p.games, to_cents(p.balance))

    def game_added(self, game: Game) -> None:
        apply_delta(self._roster, game, +1)

    def game_removed(self, game: Game) -> None:
        apply_delta(self._roster, game, -1)

    def game_replaced(self, old: Game, new: Game) -> None:
        # Pruning waits until both deltas are in so players kept by the edit
        # stay where they are in the roster.
        apply_delta(self._roster, old, -1, prune=False)
        apply_delta(self._roster, new, +1, prune=False)
        prune_roster(self._roster)

    def players(self, games: Sequence[Game]) -> List[Player]:
        # Copies; the running totals stay private.
        return [Player(p.name, p.games, p.balance) for p in self._roster.values()]


class ReplayStats(StatsAggregator):
    """Roster recomputed from the ledger on every read."""

    def game_added(self, game: Game) -> None:
        pass

    def game_removed(self, game: Game) -> None:
        pass

    def game_replaced(self, old: Game, new: Game) -> None:
        pass

    def players(self, games: Sequence[Game]) -> List[Player]:
        return list(recompute_roster(games).values())


STATS_MODES = ("incremental", "replay")


def create_stats(mode: str, players: Optional[Iterable[Player]] = None) -> StatsAggregator:
    """
    Build the stats strategy named by `mode`.

    `players` seeds the incremental roster; the replay strategy ignores it.
    """

    if mode == "incremental":
        return IncrementalStats(players)
    if mode == "replay":
        return ReplayStats()
    raise ValueError(f"Unknown stats mode: {mode!r} (expected one of {', '.join(STATS_MODES)})")
