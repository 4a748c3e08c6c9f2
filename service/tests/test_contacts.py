"""
Tests for contact rendering.
"""

from aptbot.services.registry import ApartmentRecord
from aptbot.utils.contacts import escape_markdown, render_contact, render_contacts


class TestRenderContact:

    def test_username(self):
        assert render_contact(1, "alice") == "@alice"

    def test_underscore_escaped(self):
        assert render_contact(1, "john_doe") == "@john\\_doe"

    def test_missing_username_renders_mention_link(self):
        assert render_contact(77, None) == "[resident](tg://user?id=77)"

    def test_empty_username_treated_as_missing(self):
        assert render_contact(77, "", placeholder="жилец") == "[жилец](tg://user?id=77)"


class TestRenderContacts:

    def test_joined_with_comma(self):
        records = [
            ApartmentRecord(42, 1, "alice", 7),
            ApartmentRecord(42, 2, None, 7),
            ApartmentRecord(42, 3, "bob_b", 7),
        ]
        assert render_contacts(records) == "@alice, [resident](tg://user?id=2), @bob\\_b"

    def test_empty(self):
        assert render_contacts([]) == ""


class TestEscapeMarkdown:

    def test_control_characters(self):
        assert escape_markdown("a_b*c`d[e") == "a\\_b\\*c\\`d\\[e"

    def test_plain_text_unchanged(self):
        assert escape_markdown("alice") == "alice"
