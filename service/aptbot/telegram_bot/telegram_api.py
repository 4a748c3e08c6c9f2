"""
Telegram Bot API client for sending messages.

Used for private messages that are not replies to the incoming update
(the /aptslist batch goes to the sender's private chat).
"""

import httpx
from typing import Optional

from aptbot.config import get_settings
from aptbot.errors import TransportError


async def send_message(chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
    """
    Send message to Telegram user.

    Args:
        chat_id: Telegram chat ID (user ID for private chats)
        text: Message text
        parse_mode: Optional parse mode (Markdown, HTML)

    Raises:
        TransportError: network failure or non-2xx answer from Telegram
            (e.g. 403 when the user never started a private chat)
    """
    settings = get_settings()

    url = f"https://api.telegram.org/bot{settings.telegram_bot_token}/sendMessage"

    payload = {
        "chat_id": chat_id,
        "text": text
    }

    if parse_mode:
        payload["parse_mode"] = parse_mode

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransportError(
            f"sendMessage to {chat_id} failed: {e.response.status_code} {e.response.text[:200]}"
        ) from e
    except httpx.HTTPError as e:
        raise TransportError(f"sendMessage to {chat_id} failed: {e}") from e
