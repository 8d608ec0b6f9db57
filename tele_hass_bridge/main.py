"""Entrypoint for running the Home Assistant bridge bot from the package.

This module wires up the Application, registers handlers and runs polling.
"""

from __future__ import annotations

import logging

from telegram import BotCommand
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from .logger import setup_logging
from . import config
from .commands import COMMANDS
from .handlers import dispatch
from .handlers.callbacks import handle_callback_query
from .handlers.replies import on_message
from .state import BOT_STATE_KEY, BotState
from .background import ensure_started

logger = logging.getLogger(__name__)


def build_application() -> Application:
    if config.TOKEN is None:
        raise RuntimeError("BOT_TOKEN environment variable is not set")

    app = Application.builder().token(config.TOKEN).build()

    app.bot_data.setdefault(BOT_STATE_KEY, BotState())

    for spec in COMMANDS:
        fn = getattr(dispatch, spec.handler)
        triggers = [spec.name, *spec.aliases]
        app.add_handler(CommandHandler(triggers, fn))

    app.add_handler(CallbackQueryHandler(handle_callback_query, pattern=r"^hass:"))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, on_message))
    app.add_error_handler(on_error)

    return app


async def on_error(update: object, context) -> None:
    logger.error("Unhandled error while processing update", exc_info=context.error)


async def register_bot_commands(app: Application) -> None:
    """Register bot commands for Telegram autocomplete."""
    try:
        bot_commands = [BotCommand(spec.name, spec.description) for spec in COMMANDS]
        await app.bot.set_my_commands(bot_commands)
        logger.info(f"Registered {len(bot_commands)} commands for autocomplete")
    except Exception as e:
        logger.warning(f"Failed to register bot commands: {e}")


async def post_init(app: Application) -> None:
    """Start background tasks once the bot is connected."""
    try:
        ensure_started(app)
    except Exception as e:
        logger.warning("Failed to start background tasks: %s", e)

    await register_bot_commands(app)


def run() -> None:
    setup_logging()
    logger.info("Starting tele_hass_bridge")
    app = build_application()

    app.post_init = post_init

    # run polling; keep the stop_signals None so container shutdown behaves normally
    app.run_polling(stop_signals=None)


if __name__ == "__main__":
    run()
