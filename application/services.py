from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from domain.errors import NotFoundError, SerializationError, ValidationError
from domain.ledger import Ledger
from domain.models import Game, GameDraft, GameType, Player
from domain.repositories import GAMES_KEY, PLAYERS_KEY, StateStore
from domain.stats import (
    SortKey,
    SortOrder,
    create_stats,
    recompute_roster,
    roster_snapshot,
    sort_roster,
)
from infrastructure.serialization import dump_games, dump_players, load_games, load_players

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Filter chips of the games list.
GAME_FILTERS = {
    "all": None,
    "cash": GameType.CASH_GAME,
    "tournaments": GameType.TOURNAMENT,
}


@dataclass
class AppState:
    """
    Everything the tracker holds in memory, plus where it is persisted.

    One instance is created by the entry point and handed to every service
    call and front-end handler; there is no module-level state.
    """

    ledger: Ledger
    store: StateStore
    stats_mode: str = "incremental"


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None


@dataclass
class GameResult:
    """Result of adding or editing a game."""

    success: bool
    error_message: Optional[str] = None
    game: Optional[Game] = None
    updated: bool = False


def _read(store: StateStore, key: str, decode: Callable[[str], T]) -> Optional[T]:
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return decode(raw)
    except SerializationError as exc:
        logger.warning("Ignoring stored %s: %s", key, exc)
        return None


def load_state(store: StateStore, stats_mode: str = "incremental", **ledger_options) -> AppState:
    """
    Restore the tracker from `store`.

    Missing or unreadable games start an empty ledger. The stored roster is
    only a cache: when it is missing, unreadable or out of line with the
    games, it is rebuilt by replaying the games.
    """

    games = _read(store, GAMES_KEY, load_games) or []
    replayed = list(recompute_roster(games).values())

    players = _read(store, PLAYERS_KEY, load_players)
    if players is None:
        players = replayed
    elif roster_snapshot(players) != roster_snapshot(replayed):
        logger.warning("Stored players do not match stored games; rebuilding roster.")
        players = replayed

    stats = create_stats(stats_mode, players)
    ledger = Ledger(stats, games, **ledger_options)
    logger.info("Loaded %d games and %d players (stats mode: %s)", len(games), len(players), stats_mode)
    return AppState(ledger=ledger, store=store, stats_mode=stats_mode)


def save_state(state: AppState) -> None:
    """
    Write a full snapshot of games and players to the store.

    Persistence is best effort: a failing store is logged and the in-memory
    state stays authoritative until the next successful write.
    """

    try:
        state.store.put(GAMES_KEY, dump_games(state.ledger.games))
        state.store.put(PLAYERS_KEY, dump_players(state.ledger.players()))
    except Exception:
        logger.exception("Failed to persist tracker state")


def add_or_update_game(state: AppState, draft: GameDraft) -> GameResult:
    """
    Record a game from the entry form.

    A draft whose `id` names a stored game edits that game; any other draft
    is added as a new game. Rejected drafts leave everything unchanged.
    """

    ledger = state.ledger
    try:
        if draft.id is not None and ledger.contains(draft.id):
            game = ledger.update_game(draft.id, draft)
            updated = True
        else:
            game = ledger.add_game(draft)
            updated = False
    except ValidationError as exc:
        logger.info("Rejected game draft: %s", exc)
        return GameResult(success=False, error_message=str(exc))

    save_state(state)
    logger.info(
        "%s game %s (%s, %d players, total %s)",
        "Updated" if updated else "Added",
        game.id,
        game.type.value,
        len(game.players),
        game.total_value,
    )
    return GameResult(success=True, game=game, updated=updated)


def delete_game(state: AppState, game_id: int) -> OperationResult:
    """Delete a game; an unknown id changes nothing."""

    try:
        state.ledger.delete_game(game_id)
    except NotFoundError as exc:
        logger.info("Delete ignored: %s", exc)
        return OperationResult(success=False, error_message=str(exc))

    save_state(state)
    logger.info("Deleted game %s", game_id)
    return OperationResult(success=True)


def get_game(state: AppState, game_id: int) -> Optional[Game]:
    try:
        return state.ledger.get_game(game_id)
    except NotFoundError:
        return None


def list_games(state: AppState, game_filter: str = "all") -> List[Game]:
    """Games, most recent first, restricted by one of `GAME_FILTERS`."""

    if game_filter not in GAME_FILTERS:
        raise ValueError(f"Unknown game filter: {game_filter!r}")
    return state.ledger.list_games(GAME_FILTERS[game_filter])


def get_roster(
    state: AppState,
    sort_key: SortKey = SortKey.BALANCE,
    order: SortOrder = SortOrder.DESC,
) -> List[Player]:
    return sort_roster(state.ledger.players(), sort_key, order)


def draft_from_game(game: Game) -> GameDraft:
    """Pre-fill an edit draft with a stored game."""

    return GameDraft(type=game.type, players=list(game.players), id=game.id)
