"""
Command handlers.

Each handler gets the request-scoped CommandRequest (with the parsed command
already attached) and the shared BotServices, and returns the Reply to post
in the chat. Handlers hold no state of their own; everything persistent goes
through the registry store.

Bad input raises ValidationError with a message key; store failures propagate
as StoreError. The dispatcher turns both into replies.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from ..errors import ValidationError
from ..services.batch_notifier import BatchNotifier, BatchState
from ..services.registry import RegistryStore
from ..utils.contacts import render_contacts
from ..utils.validation import is_positive_integer
from .logging_config import bot_logger as logger
from .messages import MessageCatalog
from .parser import ParsedCommand

MARKDOWN = "Markdown"


@dataclass(frozen=True)
class CommandRequest:
    """One inbound text message, as seen by the handlers."""
    chat_id: int
    user_id: Optional[int]
    username: Optional[str]
    text: str
    command: Optional[ParsedCommand] = None

    @property
    def args(self) -> tuple[str, ...]:
        return self.command.args if self.command else ()


@dataclass(frozen=True)
class Reply:
    text: str
    parse_mode: Optional[str] = None


@dataclass
class BotServices:
    store: RegistryStore
    notifier: BatchNotifier
    catalog: MessageCatalog
    batch_state: BatchState


Handler = Callable[[CommandRequest, BotServices], Awaitable[Reply]]


# ============================================
# Validation helpers
# ============================================

def require_sender(request: CommandRequest) -> int:
    if request.user_id is None:
        raise ValidationError("no_sender")
    return request.user_id


def require_apartment_number(args: tuple[str, ...]) -> int:
    if not args:
        raise ValidationError("apt_number_missing")
    if len(args) > 1:
        raise ValidationError("apt_number_single")
    if not is_positive_integer(args[0]):
        raise ValidationError("apt_number_invalid")
    return int(args[0])


# ============================================
# Handlers
# ============================================

async def handle_setapt(request: CommandRequest, services: BotServices) -> Reply:
    """/setapt <number>: register or move the sender."""
    apartment_number = require_apartment_number(request.args)
    user_id = require_sender(request)

    existing = await services.store.find_by_user(request.chat_id, user_id)
    await services.store.upsert(request.chat_id, user_id, request.username, apartment_number)

    if existing is None:
        logger.info(f"[setapt] Registered user_id={user_id} chat_id={request.chat_id} apt={apartment_number}")
    else:
        logger.info(
            f"[setapt] Updated user_id={user_id} chat_id={request.chat_id} "
            f"apt={existing.apartment_number}->{apartment_number}"
        )

    return Reply(services.catalog["setapt_done"])


async def handle_aptcontacts(request: CommandRequest, services: BotServices) -> Reply:
    """/aptcontacts <number>: who lives in that apartment."""
    apartment_number = require_apartment_number(request.args)

    residents = await services.store.find_by_apartment(request.chat_id, apartment_number)
    if not residents:
        return Reply(services.catalog["nobody_in_apartment"])

    return Reply(
        render_contacts(residents, services.catalog["contact_placeholder"]),
        parse_mode=MARKDOWN
    )


async def handle_aptslist(request: CommandRequest, services: BotServices) -> Reply:
    """/aptslist: whole chat list, delivered privately to the sender."""
    user_id = require_sender(request)

    records = await services.store.list_all(request.chat_id)
    job = services.notifier.start(user_id, records)
    if job is None:
        return Reply(services.catalog["batch_busy"])

    return Reply(services.catalog["list_sending"])


async def handle_delme(request: CommandRequest, services: BotServices) -> Reply:
    """/delme: forget the sender in this chat."""
    user_id = require_sender(request)

    await services.store.delete(request.chat_id, user_id)
    logger.info(f"[delme] Removed user_id={user_id} chat_id={request.chat_id}")

    return Reply(services.catalog["farewell"])


async def handle_start(request: CommandRequest, services: BotServices) -> Reply:
    return Reply(services.catalog["start"])


async def handle_help(request: CommandRequest, services: BotServices) -> Reply:
    return Reply(services.catalog["help"])


COMMAND_HANDLERS: Dict[str, Handler] = {
    "setapt": handle_setapt,
    "aptcontacts": handle_aptcontacts,
    "aptslist": handle_aptslist,
    "delme": handle_delme,
    "start": handle_start,
    "help": handle_help,
}
