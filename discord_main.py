import logging

from application.services import load_state
from infrastructure.config import create_state_store, load_settings
from interfaces.discord.handlers import create_discord_bot


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    store = create_state_store(settings)
    state = load_state(store, settings.stats_mode)

    bot = create_discord_bot(state)
    # Logging is already configured above.
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
