"""
Contact rendering for Telegram legacy Markdown.

Residents with a username are shown as @username; residents without one get
an inline mention link keyed by user id.
"""

import re
from typing import Iterable, Optional

# Characters that legacy Markdown treats as formatting
_MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")


def escape_markdown(text: str) -> str:
    """Escape Markdown control characters (underscore first of all)."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def render_contact(user_id: int, username: Optional[str], placeholder: str = "resident") -> str:
    if username:
        return f"@{escape_markdown(username)}"
    return f"[{escape_markdown(placeholder)}](tg://user?id={user_id})"


def render_contacts(records: Iterable, placeholder: str = "resident") -> str:
    """Render residents (anything with user_id/username) joined by ', '."""
    return ", ".join(
        render_contact(record.user_id, record.username, placeholder)
        for record in records
    )
