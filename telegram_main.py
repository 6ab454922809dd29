import logging

from application.services import load_state
from infrastructure.config import create_state_store, load_settings
from interfaces.telegram.handlers import create_telegram_bot


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    store = create_state_store(settings)
    state = load_state(store, settings.stats_mode)

    bot = create_telegram_bot(settings.telegram_token, state)
    logging.getLogger(__name__).info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()
