import asyncio
import json

from fastapi import FastAPI, Request, Header, HTTPException
from fastapi.responses import PlainTextResponse

from aptbot.config import get_settings
from aptbot.errors import MalformedRequestError
from aptbot.services.registry import get_registry_store
from aptbot.telegram_bot.bot import handle_telegram_update, initialize_bot, shutdown_bot
from aptbot.telegram_bot.logging_config import bot_logger as logger, configure_file_logging

VERSION = "0.1.0"

app = FastAPI(
    title="Apartment Registry Bot",
    description="Who lives in which apartment, per Telegram group chat",
    version=VERSION
)

# Keep references so fire-and-forget tasks are not garbage collected
_background_tasks: set[asyncio.Task] = set()


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Check the registry store and initialize the bot."""
    settings = get_settings()
    configure_file_logging(settings)

    # StoreError here aborts startup: no handlers without a store
    await get_registry_store().ping()

    logger.info("[STARTUP] Initializing Telegram bot...")
    await initialize_bot()
    logger.info("[STARTUP] Bot ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown bot on application shutdown."""
    logger.info("[SHUTDOWN] Shutting down Telegram bot...")
    await shutdown_bot()
    logger.info("[SHUTDOWN] Bot stopped")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": VERSION
    }


def parse_update_body(body: bytes) -> dict:
    """Decode a webhook body into an update dict."""
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedRequestError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedRequestError(f"Expected JSON object, got {type(data).__name__}")

    return data


# Telegram webhook endpoint
@app.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: str = Header(None)
):
    """
    Webhook endpoint for Telegram updates.

    Always answers 200 "ok" once the secret matches, whatever happens to the
    update, so Telegram does not keep redelivering it.
    """
    settings = get_settings()

    # Verify secret token if configured
    if settings.telegram_webhook_secret:
        if x_telegram_bot_api_secret_token != settings.telegram_webhook_secret:
            raise HTTPException(status_code=403, detail="Invalid secret token")

    try:
        update_data = parse_update_body(await request.body())
    except MalformedRequestError as e:
        logger.warning(f"Ignoring malformed webhook body: {e}")
        return PlainTextResponse("ok")

    # Handle update in background (fire-and-forget for fast 200 OK)
    task = asyncio.create_task(handle_telegram_update(update_data))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    return PlainTextResponse("ok")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
