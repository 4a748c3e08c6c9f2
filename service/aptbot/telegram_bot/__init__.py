"""
Telegram Bot module for the apartment registry.

- Receives webhook updates from Telegram (see aptbot.main)
- Drops everything while an /aptslist batch is being delivered
- Parses /commands and routes them to handlers
- Replies in the chat, or privately for /aptslist

Submodules are imported directly (aptbot.telegram_bot.bot, ...); this package
does not re-export them so that services can use logging_config and messages
without pulling in the whole bot.
"""
