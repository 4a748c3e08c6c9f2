"""
Command parser: raw message text -> ParsedCommand.
"""

import re
from dataclasses import dataclass
from typing import Optional

# "/name rest": name is everything up to the first whitespace
_COMMAND_RE = re.compile(r"^/(\S+)\s*(.*)$", re.DOTALL)


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    args: tuple[str, ...] = ()


def parse_command(text: Optional[str]) -> Optional[ParsedCommand]:
    """
    Parse "/setapt 12" into ParsedCommand("setapt", ("12",)).

    Returns None for plain text, a bare "/" or "/" followed by whitespace.
    Group chats deliver "/setapt@my_bot 12"; the @bot suffix is dropped.
    """
    if not text or not text.startswith("/"):
        return None

    match = _COMMAND_RE.match(text)
    if match is None:
        return None

    name = match.group(1).split("@", 1)[0].lower()
    if not name:
        return None

    return ParsedCommand(name=name, args=tuple(match.group(2).split()))
