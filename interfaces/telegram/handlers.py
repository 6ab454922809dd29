from __future__ import annotations

import logging

import telebot
from telebot.apihelper import ApiTelegramException
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

from application.services import (
    GAME_FILTERS,
    AppState,
    add_or_update_game,
    delete_game,
    get_game,
    get_roster,
    list_games,
)
from domain.stats import SortKey, SortOrder
from interfaces.formatting import (
    format_game_detail,
    format_game_list,
    format_roster,
    next_sort,
    parse_filter,
    parse_game_args,
    parse_game_id,
    parse_sort,
)
from interfaces.telegram.callback_data import (
    encode_delete_confirmation,
    encode_games_filter,
    encode_rankings_sort,
    parse_delete_confirmation,
    parse_games_filter,
    parse_rankings_sort,
)

logger = logging.getLogger(__name__)

_FILTER_LABELS = {"all": "All", "cash": "Cash", "tournaments": "Tournaments"}
_SORT_LABELS = {SortKey.NAME: "Name", SortKey.GAMES: "Games", SortKey.BALANCE: "Balance"}


def _args(message) -> list[str]:
    """Command arguments, without the leading `/command`."""

    return message.text.split()[1:]


def _filter_markup(current: str) -> InlineKeyboardMarkup:
    markup = InlineKeyboardMarkup(row_width=3)
    markup.add(
        *[
            InlineKeyboardButton(
                f"[{_FILTER_LABELS[f]}]" if f == current else _FILTER_LABELS[f],
                callback_data=encode_games_filter(f),
            )
            for f in GAME_FILTERS
        ]
    )
    return markup


def _rankings_markup(sort_key: SortKey, order: SortOrder) -> InlineKeyboardMarkup:
    markup = InlineKeyboardMarkup(row_width=3)
    buttons = []
    for column in SortKey:
        label = _SORT_LABELS[column]
        if column is sort_key:
            label += " ▲" if order is SortOrder.ASC else " ▼"
        buttons.append(
            InlineKeyboardButton(
                label,
                callback_data=encode_rankings_sort(*next_sort(sort_key, order, column)),
            )
        )
    markup.add(*buttons)
    return markup


def _rankings_text(state: AppState, sort_key: SortKey, order: SortOrder) -> str:
    return "Rankings\n" + format_roster(get_roster(state, sort_key, order))


def create_telegram_bot(bot_token: str, state: AppState) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from application services. The
    bot is not threaded, so handlers run one at a time against `state`.
    """

    bot = telebot.TeleBot(bot_token, threaded=False)

    def _edit(call, text: str, markup: InlineKeyboardMarkup | None = None) -> None:
        try:
            bot.edit_message_text(
                text,
                chat_id=call.message.chat.id,
                message_id=call.message.id,
                reply_markup=markup,
            )
        except ApiTelegramException as exc:
            # Telegram refuses edits that leave the message unchanged.
            logger.debug("Message edit skipped: %s", exc)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the poker session tracker!\n"
            "Use /game to record a game and /rankings to see who is up.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        bot.send_message(
            message.chat.id,
            "/game <cash|tournament> name:balance ...    - record a game\n"
            "/edit <id> <cash|tournament> name:balance ... - replace a game\n"
            "/delete <id>                               - delete a game\n"
            "/show <id>                                 - show one game\n"
            "/games [all|cash|tournaments]              - list games\n"
            "/rankings [name|games|balance] [asc|desc]  - player rankings\n"
            "Balances must add up to zero.",
        )

    @bot.message_handler(commands=["game", "edit"])
    def handle_game(message):
        args = _args(message)
        op = message.text.split()[0][1:].split("@")[0]

        try:
            game_id = None
            if op == "edit":
                if not args:
                    bot.send_message(message.chat.id, "Please enter the id of the game to edit.")
                    return
                game_id = parse_game_id(args[0])
                args = args[1:]
                if get_game(state, game_id) is None:
                    bot.send_message(message.chat.id, f"Game {game_id} not found.")
                    return
            draft = parse_game_args(args, game_id=game_id)
        except ValueError as exc:
            bot.send_message(message.chat.id, str(exc))
            return

        result = add_or_update_game(state, draft)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        verb = "updated" if result.updated else "added"
        bot.send_message(
            message.chat.id,
            f"Your game has been {verb} successfully.\n\n{format_game_detail(result.game)}",
        )

    @bot.message_handler(commands=["show"])
    def handle_show(message):
        args = _args(message)
        if not args:
            bot.send_message(message.chat.id, "Please enter a game id.")
            return
        try:
            game_id = parse_game_id(args[0])
        except ValueError as exc:
            bot.send_message(message.chat.id, str(exc))
            return

        game = get_game(state, game_id)
        if game is None:
            bot.send_message(message.chat.id, f"Game {game_id} not found.")
            return
        bot.send_message(message.chat.id, format_game_detail(game))

    @bot.message_handler(commands=["delete"])
    def handle_delete(message):
        args = _args(message)
        if not args:
            bot.send_message(message.chat.id, "Please enter a game id.")
            return
        try:
            game_id = parse_game_id(args[0])
        except ValueError as exc:
            bot.send_message(message.chat.id, str(exc))
            return

        game = get_game(state, game_id)
        if game is None:
            bot.send_message(message.chat.id, f"Game {game_id} not found.")
            return

        markup = InlineKeyboardMarkup(row_width=2)
        markup.add(
            InlineKeyboardButton(
                "yes",
                callback_data=encode_delete_confirmation(game_id, accepted=True),
            ),
            InlineKeyboardButton(
                "no",
                callback_data=encode_delete_confirmation(game_id, accepted=False),
            ),
        )
        bot.send_message(
            message.chat.id,
            f"Delete this game?\n\n{format_game_detail(game)}",
            reply_markup=markup,
        )

    @bot.message_handler(commands=["games"])
    def handle_games(message):
        args = _args(message)
        try:
            game_filter = parse_filter(args[0] if args else None)
        except ValueError as exc:
            bot.send_message(message.chat.id, str(exc))
            return

        bot.send_message(
            message.chat.id,
            format_game_list(list_games(state, game_filter)),
            reply_markup=_filter_markup(game_filter),
        )

    @bot.message_handler(commands=["rankings", "list"])
    def handle_rankings(message):
        try:
            sort_key, order = parse_sort(_args(message))
        except ValueError as exc:
            bot.send_message(message.chat.id, str(exc))
            return

        bot.send_message(
            message.chat.id,
            _rankings_text(state, sort_key, order),
            reply_markup=_rankings_markup(sort_key, order),
        )

    @bot.callback_query_handler(func=lambda call: call.data.startswith("games:"))
    def handle_filter_choice(call):
        try:
            game_filter = parse_games_filter(call.data)
            games = list_games(state, game_filter)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid filter.")
            return

        bot.answer_callback_query(call.id)
        _edit(call, format_game_list(games), _filter_markup(game_filter))

    @bot.callback_query_handler(func=lambda call: call.data.startswith("rank:"))
    def handle_sort_choice(call):
        try:
            sort_key, order = parse_rankings_sort(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid sort.")
            return

        bot.answer_callback_query(call.id)
        _edit(call, _rankings_text(state, sort_key, order), _rankings_markup(sort_key, order))

    @bot.callback_query_handler(func=lambda call: call.data.startswith("del:"))
    def handle_delete_confirmation(call):
        try:
            accepted, game_id = parse_delete_confirmation(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid confirmation.")
            return

        bot.answer_callback_query(call.id)
        if not accepted:
            _edit(call, "Game kept.")
            return

        result = delete_game(state, game_id)
        if not result.success:
            _edit(call, result.error_message)
            return
        _edit(call, f"Game {game_id} deleted.")

    return bot
