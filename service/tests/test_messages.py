"""
Tests for the reply message catalog.
"""

from aptbot.telegram_bot.messages import MESSAGES, get_catalog


class TestMessageCatalog:

    def test_unknown_locale_falls_back_to_english(self):
        catalog = get_catalog("de")
        assert catalog.locale == "en"
        assert catalog["farewell"] == MESSAGES["en"]["farewell"]

    def test_missing_key_falls_back_to_english(self, monkeypatch):
        partial = {"farewell": "Пока!"}
        monkeypatch.setitem(MESSAGES, "xx", partial)

        catalog = get_catalog("xx")

        assert catalog["farewell"] == "Пока!"
        assert catalog["help"] == MESSAGES["en"]["help"]

    def test_russian_catalog_is_complete(self):
        assert set(MESSAGES["ru"]) == set(MESSAGES["en"])
