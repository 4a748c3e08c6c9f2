"""
Tests for the python-telegram-bot glue: Update -> CommandRequest -> reply.
"""

import asyncio
from types import SimpleNamespace

import pytest
from telegram import Message, Update

import aptbot.telegram_bot.bot as bot
from aptbot.telegram_bot.dispatcher import CommandDispatcher
from aptbot.telegram_bot.messages import get_catalog

MESSAGES = get_catalog("en")


def make_update(text, chat_id=42, user=None):
    data = {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "date": 1700000000,
            "chat": {"id": chat_id, "type": "group", "title": "House 7"},
            "text": text,
        },
    }
    if user is not None:
        data["message"]["from"] = user
    return Update.de_json(data, None)


ALICE = {"id": 1, "is_bot": False, "first_name": "Alice", "username": "alice"}


@pytest.fixture
def replies(monkeypatch, services):
    """Route bot.py to a test dispatcher and capture reply_text calls."""
    sent = []

    async def fake_reply_text(self, text, parse_mode=None, **kwargs):
        sent.append((self.chat_id, text, parse_mode))

    monkeypatch.setattr(Message, "reply_text", fake_reply_text)
    monkeypatch.setattr(bot, "get_dispatcher", lambda: CommandDispatcher(services))
    return sent


class TestHandleUpdate:

    def test_aptcontacts_reply_uses_markdown(self, replies, store):
        store.add(42, 1, "alice", 7)
        store.add(42, 2, None, 7)

        asyncio.run(bot.handle_update(make_update("/aptcontacts 7", user=ALICE), None))

        assert replies == [(42, "@alice, [resident](tg://user?id=2)", "Markdown")]

    def test_sender_is_taken_from_update(self, replies, store):
        asyncio.run(bot.handle_update(make_update("/setapt 5", user=ALICE), None))

        record = store.records[(42, 1)]
        assert record.username == "alice"
        assert record.apartment_number == 5
        assert replies == [(42, MESSAGES["setapt_done"], None)]

    def test_update_without_sender(self, replies, store):
        asyncio.run(bot.handle_update(make_update("/setapt 5"), None))

        assert replies == [(42, MESSAGES["no_sender"], None)]
        assert store.records == {}

    def test_nothing_sent_while_batch_in_flight(self, replies, services):
        services.batch_state.try_begin()

        asyncio.run(bot.handle_update(make_update("/help", user=ALICE), None))

        assert replies == []

    def test_update_without_text_ignored(self, replies, store):
        update = Update.de_json({"update_id": 2}, None)

        asyncio.run(bot.handle_update(update, None))

        assert replies == []
        assert store.calls == []


class TestHandleError:

    def test_generic_failure_reply(self, replies):
        context = SimpleNamespace(error=RuntimeError("boom"))

        asyncio.run(bot.handle_error(make_update("/setapt 5", user=ALICE), context))

        assert replies == [(42, MESSAGES["generic_failure"], None)]

    def test_non_update_only_logged(self, replies):
        context = SimpleNamespace(error=RuntimeError("boom"))

        asyncio.run(bot.handle_error(None, context))

        assert replies == []
