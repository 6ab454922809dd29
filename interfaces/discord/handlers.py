from __future__ import annotations

import logging
from typing import Dict, Tuple

import discord
from discord.ext import commands

from application.services import (
    AppState,
    add_or_update_game,
    delete_game,
    get_game,
    get_roster,
    list_games,
)
from interfaces.formatting import (
    format_game_detail,
    format_game_list,
    format_roster,
    parse_filter,
    parse_game_args,
    parse_game_id,
    parse_sort,
)

logger = logging.getLogger(__name__)

# Discord messages are capped at 2000 characters.
_MAX_MESSAGE = 1900

# Unanswered delete confirmations kept before the oldest are forgotten.
MAX_PENDING_DELETES = 50


def _code_block(text: str) -> str:
    if len(text) > _MAX_MESSAGE:
        text = text[:_MAX_MESSAGE].rsplit("\n", 1)[0] + "\n..."
    return f"```\n{text}\n```"


def remember_pending(
    pending: Dict[int, Tuple[int, int]],
    message_id: int,
    request: Tuple[int, int],
    limit: int = MAX_PENDING_DELETES,
) -> None:
    """
    Track a delete confirmation, dropping the oldest ones beyond `limit`.

    A newer confirmation for the same game replaces the older one.
    """

    for stale_id in [m for m, (game_id, _) in pending.items() if game_id == request[0]]:
        del pending[stale_id]
    pending[message_id] = request
    while len(pending) > limit:
        del pending[next(iter(pending))]


def create_discord_bot(state: AppState) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface: record, edit, delete and list games, and show
    player rankings.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.reactions = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    # Pending delete confirmations keyed by the confirmation message ID.
    pending_deletes: Dict[int, Tuple[int, int]] = {}
    # value: (game_id, requester_discord_id)

    async def _save_game(ctx: commands.Context, args: Tuple[str, ...], game_id: int | None):
        try:
            draft = parse_game_args(args, game_id=game_id)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        result = add_or_update_game(state, draft)
        if not result.success:
            await ctx.send(result.error_message or "Game rejected.")
            return

        verb = "updated" if result.updated else "added"
        await ctx.send(
            f"Your game has been {verb} successfully.\n"
            + _code_block(format_game_detail(result.game))
        )

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, commands.UserInputError):
            await ctx.send(f"{error}\nType !help to see available commands.")
            return
        logger.error("Command %s failed", ctx.command, exc_info=error)
        await ctx.send("Something went wrong.")

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await ctx.send(
            "Welcome to the poker session tracker (Discord)!\n"
            "Use !game to record a game and !rankings to see who is up.\n"
            "Type !help to see available commands."
        )

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(
            _code_block(
                "!game <cash|tournament> name:balance ...       - record a game\n"
                "!edit <id> <cash|tournament> name:balance ...  - replace a game\n"
                "!delete <id>                                  - delete a game\n"
                "!show <id>                                    - show one game\n"
                "!games [all|cash|tournaments]                 - list games\n"
                "!rankings [name|games|balance] [asc|desc]     - player rankings\n"
                "Balances must add up to zero."
            )
        )

    @bot.command(name="game")
    async def game_cmd(ctx: commands.Context, *args: str):
        await _save_game(ctx, args, None)

    @bot.command(name="edit")
    async def edit_cmd(ctx: commands.Context, game_id: str, *args: str):
        try:
            parsed_id = parse_game_id(game_id)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        if get_game(state, parsed_id) is None:
            await ctx.send(f"Game {parsed_id} not found.")
            return
        await _save_game(ctx, args, parsed_id)

    @bot.command(name="show")
    async def show_cmd(ctx: commands.Context, game_id: str):
        try:
            parsed_id = parse_game_id(game_id)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        game = get_game(state, parsed_id)
        if game is None:
            await ctx.send(f"Game {parsed_id} not found.")
            return
        await ctx.send(_code_block(format_game_detail(game)))

    @bot.command(name="games")
    async def games_cmd(ctx: commands.Context, game_filter: str | None = None):
        try:
            parsed_filter = parse_filter(game_filter)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        await ctx.send(_code_block(format_game_list(list_games(state, parsed_filter))))

    @bot.command(name="rankings", aliases=["list"])
    async def rankings_cmd(ctx: commands.Context, *args: str):
        try:
            sort_key, order = parse_sort(args)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        await ctx.send(_code_block(format_roster(get_roster(state, sort_key, order))))

    @bot.command(name="delete")
    async def delete_cmd(ctx: commands.Context, game_id: str):
        try:
            parsed_id = parse_game_id(game_id)
        except ValueError as exc:
            await ctx.send(str(exc))
            return

        game = get_game(state, parsed_id)
        if game is None:
            await ctx.send(f"Game {parsed_id} not found.")
            return

        confirmation_message = await ctx.send(
            f"{ctx.author.mention}, delete this game?\n"
            + _code_block(format_game_detail(game))
            + "React with ✅ to confirm or ❌ to keep it."
        )
        await confirmation_message.add_reaction("✅")
        await confirmation_message.add_reaction("❌")

        remember_pending(pending_deletes, confirmation_message.id, (parsed_id, ctx.author.id))

    @bot.event
    async def on_reaction_add(reaction: discord.Reaction, user: discord.abc.User):
        # Ignore bot reactions and reactions not on tracked messages.
        if user.bot:
            return

        message_id = reaction.message.id
        if message_id not in pending_deletes:
            return

        game_id, requester_id = pending_deletes[message_id]

        # Only the member who asked for the delete can confirm it.
        if user.id != requester_id:
            return

        emoji = str(reaction.emoji)
        channel = reaction.message.channel

        if emoji == "✅":
            pending_deletes.pop(message_id, None)
            result = delete_game(state, game_id)
            if not result.success:
                await channel.send(result.error_message or "Delete failed.")
            else:
                await channel.send(f"Game {game_id} deleted.")
        elif emoji == "❌":
            pending_deletes.pop(message_id, None)
            await channel.send(f"Game {game_id} kept.")

    return bot
