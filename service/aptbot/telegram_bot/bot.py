"""
Main Telegram bot handler.

Uses python-telegram-bot library with webhook mode. Every update goes
through one TypeHandler into the CommandDispatcher, so the dispatch gate
sees all traffic before any command runs.
"""

from telegram import Update
from telegram.ext import Application, ContextTypes, TypeHandler

from aptbot.config import get_settings
from .dispatcher import get_dispatcher
from .handlers import CommandRequest
from .logging_config import bot_logger as logger


# Global application instance (initialized once)
_application: Application | None = None


async def handle_update(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Turn a text message into a CommandRequest and post the reply."""
    message = update.message
    if message is None or message.text is None:
        return

    user = update.effective_user
    request = CommandRequest(
        chat_id=message.chat_id,
        user_id=user.id if user else None,
        username=user.username if user else None,
        text=message.text,
    )

    reply = await get_dispatcher().dispatch(request)
    if reply is not None:
        await message.reply_text(reply.text, parse_mode=reply.parse_mode)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in handlers."""
    logger.error(f"Bot error: {context.error}", exc_info=context.error)

    if isinstance(update, Update) and update.effective_message:
        catalog = get_dispatcher().services.catalog
        await update.effective_message.reply_text(catalog["generic_failure"])


def get_bot_application() -> Application:
    """Get or create telegram bot application."""
    global _application

    if _application is None:
        settings = get_settings()

        _application = (
            Application.builder()
            .token(settings.telegram_bot_token)
            .updater(None)
            .build()
        )

        _application.add_handler(TypeHandler(Update, handle_update))
        _application.add_error_handler(handle_error)

        logger.info("Telegram bot application initialized")

    return _application


async def handle_telegram_update(update_data: dict) -> None:
    """
    Process incoming webhook update from Telegram.

    This is called by FastAPI webhook endpoint.
    Runs handlers in background (fire-and-forget).
    """
    try:
        app = get_bot_application()

        # Convert dict to Update object
        update = Update.de_json(update_data, app.bot)

        if update:
            await app.process_update(update)
        else:
            logger.warning("Received invalid update data")

    except Exception as e:
        logger.error(f"Failed to process update: {e}", exc_info=True)


async def initialize_bot() -> None:
    """
    Initialize bot application (call on startup).
    """
    app = get_bot_application()
    await app.initialize()
    logger.info("Bot initialized successfully")


async def shutdown_bot() -> None:
    """
    Shutdown bot application (call on shutdown).
    """
    global _application
    await get_dispatcher().services.notifier.shutdown()
    if _application:
        await _application.shutdown()
        logger.info("Bot shut down")
