from __future__ import annotations

from domain.stats import SortKey, SortOrder


def encode_games_filter(game_filter: str) -> str:
    """
    Encode a games-list filter button.

    Format: games:{filter}
    """

    return f"games:{game_filter}"


def parse_games_filter(data: str) -> str:
    parts = data.split(":")
    if len(parts) != 2 or parts[0] != "games" or not parts[1]:
        raise ValueError(f"Invalid games filter callback data: {data}")
    return parts[1]


def encode_rankings_sort(sort_key: SortKey, order: SortOrder) -> str:
    """
    Encode a rankings column button with the sort it leads to.

    Format: rank:{sort_key}:{order}
    """

    return f"rank:{sort_key.value}:{order.value}"


def parse_rankings_sort(data: str) -> tuple[SortKey, SortOrder]:
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != "rank":
        raise ValueError(f"Invalid rankings callback data: {data}")

    return SortKey(parts[1]), SortOrder(parts[2])


def encode_delete_confirmation(game_id: int, accepted: bool) -> str:
    """
    Encode a delete confirmation/decline button.

    Format:
      del:yes:{game_id}
      del:no:{game_id}
    """

    answer = "yes" if accepted else "no"
    return f"del:{answer}:{game_id}"


def parse_delete_confirmation(data: str) -> tuple[bool, int]:
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != "del" or parts[1] not in ("yes", "no"):
        raise ValueError(f"Invalid delete confirmation callback data: {data}")

    accepted = parts[1] == "yes"
    game_id = int(parts[2])
    return accepted, game_id
