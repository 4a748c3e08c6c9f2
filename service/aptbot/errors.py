"""
Error taxonomy for the apartment bot.

ValidationError is user-facing and carries a message catalog key.
Everything else is logged; the chat only ever sees the generic failure text.
"""


class AptBotError(Exception):
    """Base class for bot errors."""


class ValidationError(AptBotError):
    """Bad command arguments or unresolvable sender."""

    def __init__(self, message_key: str):
        super().__init__(message_key)
        self.message_key = message_key


class StoreError(AptBotError):
    """Registry store query or connection failure."""

    def __init__(self, stage: str, cause: Exception | None = None):
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause


class TransportError(AptBotError):
    """Outbound message could not be delivered."""


class MalformedRequestError(AptBotError):
    """Webhook body is not a JSON object."""
