"""
Shared fixtures: in-memory registry store and a recording message sender.
"""

import pytest

from aptbot.errors import StoreError, TransportError
from aptbot.services.batch_notifier import BatchNotifier, BatchState
from aptbot.services.registry import ApartmentRecord, RegistryStore
from aptbot.telegram_bot.handlers import BotServices
from aptbot.telegram_bot.messages import get_catalog


class FakeRegistryStore(RegistryStore):
    """Dict-backed store keyed by (chat_id, user_id)."""

    def __init__(self):
        self.records: dict[tuple[int, int], ApartmentRecord] = {}
        self.calls: list[str] = []
        self.fail_stage: str | None = None
        self._next_id = 1

    def _enter(self, stage: str) -> None:
        self.calls.append(stage)
        if stage == self.fail_stage:
            raise StoreError(stage, RuntimeError("connection reset"))

    def add(self, chat_id: int, user_id: int, username: str | None, apartment_number: int) -> None:
        self.records[(chat_id, user_id)] = ApartmentRecord(
            chat_id, user_id, username, apartment_number, id=self._next_id
        )
        self._next_id += 1

    async def ping(self) -> None:
        self._enter("ping")

    async def find_by_user(self, chat_id, user_id):
        self._enter("find_by_user")
        return self.records.get((chat_id, user_id))

    async def upsert(self, chat_id, user_id, username, apartment_number):
        self._enter("upsert")
        existing = self.records.get((chat_id, user_id))
        if existing is None:
            self.add(chat_id, user_id, username, apartment_number)
        else:
            existing.username = username
            existing.apartment_number = apartment_number

    async def find_by_apartment(self, chat_id, apartment_number):
        self._enter("find_by_apartment")
        return sorted(
            (r for r in self.records.values()
             if r.chat_id == chat_id and r.apartment_number == apartment_number),
            key=lambda r: r.id
        )

    async def list_all(self, chat_id):
        self._enter("list_all")
        return sorted(
            (r for r in self.records.values() if r.chat_id == chat_id),
            key=lambda r: (r.apartment_number, r.id)
        )

    async def delete(self, chat_id, user_id):
        self._enter("delete")
        self.records.pop((chat_id, user_id), None)


class RecordingSender:
    """Async send(chat_id, text, parse_mode) that records deliveries."""

    def __init__(self, fail_on: set[int] | None = None, fail_always: bool = False):
        self.sent: list[tuple[int, str, str | None]] = []
        self.attempts = 0
        self.fail_on = fail_on or set()
        self.fail_always = fail_always

    async def __call__(self, chat_id, text, parse_mode=None):
        attempt = self.attempts
        self.attempts += 1
        if self.fail_always or attempt in self.fail_on:
            raise TransportError(f"sendMessage to {chat_id} failed: 403 Forbidden")
        self.sent.append((chat_id, text, parse_mode))


def make_services(store=None, sender=None, message_limit=4096, locale="en") -> BotServices:
    catalog = get_catalog(locale)
    state = BatchState(timeout_seconds=600)
    notifier = BatchNotifier(
        send=sender or RecordingSender(),
        state=state,
        catalog=catalog,
        message_limit=message_limit,
        delay_seconds=0
    )
    return BotServices(
        store=store or FakeRegistryStore(),
        notifier=notifier,
        catalog=catalog,
        batch_state=state,
    )


@pytest.fixture
def store():
    return FakeRegistryStore()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def services(store, sender):
    return make_services(store=store, sender=sender)


@pytest.fixture
def services_factory():
    return make_services
