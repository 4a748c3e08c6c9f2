"""
Command dispatcher.

inbound request -> dispatch gate -> parser -> command handler -> Reply

The gate drops every update (from any chat) while a batch send is in flight;
dropped updates get no reply at all.
"""

from dataclasses import replace
from typing import Optional

from aptbot.config import get_settings
from aptbot.errors import StoreError, ValidationError
from aptbot.services.batch_notifier import BatchNotifier, BatchState
from aptbot.services.registry import get_registry_store
from .handlers import BotServices, CommandRequest, Reply, COMMAND_HANDLERS
from .logging_config import bot_logger as logger
from .messages import get_catalog
from .parser import parse_command
from .telegram_api import send_message


class CommandDispatcher:
    """Routes one request to its command handler."""

    def __init__(self, services: BotServices):
        self.services = services

    async def dispatch(self, request: CommandRequest) -> Optional[Reply]:
        if self.services.batch_state.is_busy():
            logger.debug(f"Batch send in progress, dropping update from chat_id={request.chat_id}")
            return None

        command = parse_command(request.text)
        request = replace(request, command=command)

        handler = COMMAND_HANDLERS.get(command.name) if command else None
        if handler is None:
            return Reply(self.services.catalog["not_understood"])

        try:
            return await handler(request, self.services)
        except ValidationError as e:
            logger.info(f"[{command.name}] Rejected: {e.message_key} (chat_id={request.chat_id})")
            return Reply(self.services.catalog[e.message_key])
        except StoreError as e:
            logger.error(
                f"[{command.name}] Store error at stage={e.stage}: {e.cause}",
                exc_info=e
            )
            return Reply(self.services.catalog["generic_failure"])


def build_services() -> BotServices:
    """Wire production services from settings."""
    settings = get_settings()
    catalog = get_catalog(settings.bot_locale)
    batch_state = BatchState(timeout_seconds=settings.batch_timeout_seconds)
    notifier = BatchNotifier(
        send=send_message,
        state=batch_state,
        catalog=catalog,
        message_limit=settings.batch_message_limit,
        delay_seconds=settings.batch_send_delay_ms / 1000
    )
    return BotServices(
        store=get_registry_store(),
        notifier=notifier,
        catalog=catalog,
        batch_state=batch_state,
    )


# Singleton
_dispatcher: Optional[CommandDispatcher] = None


def get_dispatcher() -> CommandDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = CommandDispatcher(build_services())
    return _dispatcher
