from __future__ import annotations

import json
import math
from typing import Any, Iterable, List

from domain.errors import SerializationError, ValidationError
from domain.ledger import build_game
from domain.models import Game, GameDraft, GameType, Player, PlayerResult, to_cents


def _game_to_dict(game: Game) -> dict:
    return {
        "id": game.id,
        "type": game.type.value,
        "date": game.date,
        "players": [{"name": p.name, "balance": p.balance} for p in game.players],
        "totalValue": game.total_value,
    }


def _game_from_dict(data: Any) -> Game:
    """
    Rebuild a stored game through the same validation as a new draft.

    A stored game that breaks the zero-sum rule, carries non-finite balances
    or repeats a player name is refused here rather than entering the ledger.
    """

    draft = GameDraft(
        type=GameType(data["type"]),
        players=[PlayerResult(name=str(p["name"]), balance=p["balance"]) for p in data["players"]],
    )
    try:
        return build_game(draft, int(data["id"]), str(data["date"]))
    except ValidationError as exc:
        raise ValueError(f"game {data['id']!r}: {exc}") from exc


def _player_from_dict(data: Any) -> Player:
    games = int(data["games"])
    if games < 0:
        raise ValueError(f"negative game count for {data['name']!r}")
    balance = float(data["balance"])
    if not math.isfinite(balance):
        raise ValueError(f"non-finite balance for {data['name']!r}")
    return Player(
        name=str(data["name"]),
        games=games,
        balance=to_cents(balance),
    )


def _load_list(raw: str, what: str) -> list:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Stored {what} are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise SerializationError(f"Stored {what} must be a JSON list.")
    return data


def dump_games(games: Iterable[Game]) -> str:
    """Serialize games, keeping ledger order."""

    return json.dumps([_game_to_dict(g) for g in games])


def load_games(raw: str) -> List[Game]:
    """Decode games written by `dump_games`. Raises `SerializationError`."""

    data = _load_list(raw, "games")
    try:
        games = [_game_from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializationError(f"Malformed game record: {exc}") from exc

    seen = set()
    for game in games:
        if game.id in seen:
            raise SerializationError(f"Game id {game.id} is stored more than once.")
        seen.add(game.id)
    return games


def dump_players(players: Iterable[Player]) -> str:
    return json.dumps(
        [{"name": p.name, "games": p.games, "balance": p.balance} for p in players]
    )


def load_players(raw: str) -> List[Player]:
    data = _load_list(raw, "players")
    try:
        return [_player_from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise SerializationError(f"Malformed player record: {exc}") from exc
