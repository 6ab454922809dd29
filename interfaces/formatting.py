from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from domain.models import Game, GameDraft, GameType, Player, PlayerResult
from domain.stats import SortKey, SortOrder

CURRENCY = "CHF"

_GAME_TYPE_WORDS = {
    "cash": GameType.CASH_GAME,
    "cashgame": GameType.CASH_GAME,
    "tournament": GameType.TOURNAMENT,
    "tourney": GameType.TOURNAMENT,
    "mtt": GameType.TOURNAMENT,
}

_FILTER_WORDS = {
    "all": "all",
    "cash": "cash",
    "tournament": "tournaments",
    "tournaments": "tournaments",
}


def parse_game_type(word: str) -> GameType:
    try:
        return _GAME_TYPE_WORDS[word.lower()]
    except KeyError:
        raise ValueError(f"Unknown game type {word!r}; use 'cash' or 'tournament'.") from None


def parse_player_result(token: str) -> PlayerResult:
    """
    Parse one `name:balance` token, e.g. `Alice:50` or `Bob:-12.5`.

    The last colon splits name from balance, so names may contain colons.
    """

    name, sep, amount = token.rpartition(":")
    if not sep or not name:
        raise ValueError(f"Expected name:balance, got {token!r}.")
    try:
        balance = float(amount.replace(",", "."))
    except ValueError:
        raise ValueError(f"Balance for {name} must be a number.") from None
    if not math.isfinite(balance):
        raise ValueError(f"Balance for {name} must be a finite number.")
    return PlayerResult(name=name, balance=balance)


def parse_game_args(args: Sequence[str], game_id: Optional[int] = None) -> GameDraft:
    """Turn `cash Alice:50 Bob:-50` style arguments into a draft."""

    if not args:
        raise ValueError("Please give a game type followed by name:balance pairs.")
    game_type = parse_game_type(args[0])
    players = [parse_player_result(token) for token in args[1:]]
    return GameDraft(type=game_type, players=players, id=game_id)


def parse_game_id(text: str) -> int:
    try:
        return int(text.lstrip("#"))
    except ValueError:
        raise ValueError("Game id must be a number.") from None


def parse_filter(word: Optional[str]) -> str:
    if not word:
        return "all"
    try:
        return _FILTER_WORDS[word.lower()]
    except KeyError:
        raise ValueError("Filter must be one of: all, cash, tournaments.") from None


def parse_sort(args: Sequence[str]) -> Tuple[SortKey, SortOrder]:
    """Parse optional `[name|games|balance] [asc|desc]`; balance, desc by default."""

    try:
        sort_key = SortKey(args[0].lower()) if len(args) > 0 else SortKey.BALANCE
        order = SortOrder(args[1].lower()) if len(args) > 1 else SortOrder.DESC
    except ValueError:
        raise ValueError("Usage: rankings [name|games|balance] [asc|desc]") from None
    return sort_key, order


def next_sort(
    current_key: SortKey,
    current_order: SortOrder,
    clicked: SortKey,
) -> Tuple[SortKey, SortOrder]:
    """
    Sort state after clicking a rankings column.

    Clicking the active column flips the order; another column starts
    descending.
    """

    if clicked is current_key:
        flipped = SortOrder.ASC if current_order is SortOrder.DESC else SortOrder.DESC
        return current_key, flipped
    return clicked, SortOrder.DESC


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount)} {CURRENCY}"
    return f"{amount:.2f} {CURRENCY}"


def format_game_line(game: Game) -> str:
    return f"#{game.id}  {game.date}  {game.type.value}  ({format_amount(game.total_value)})"


def format_game_list(games: Iterable[Game]) -> str:
    lines = [format_game_line(g) for g in games]
    if not lines:
        return "No games recorded yet."
    return "\n".join(lines)


def format_game_detail(game: Game) -> str:
    lines = [
        f"Game #{game.id}",
        f"{game.type.value} on {game.date}",
        f"Total Value: {format_amount(game.total_value)}",
        "Players:",
    ]
    lines.extend(f"  {p.name}: {format_amount(p.balance)}" for p in game.players)
    return "\n".join(lines)


def format_roster(players: Sequence[Player]) -> str:
    if not players:
        return "No players yet."

    lines: List[str] = []
    for rank, player in enumerate(players, start=1):
        games = "game" if player.games == 1 else "games"
        lines.append(
            f"{rank}. {player.name} - {player.games} {games}, {format_amount(player.balance)}"
        )
    return "\n".join(lines)
