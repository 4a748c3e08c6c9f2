"""
Reply strings for the bot, keyed by locale.

English is the reference catalog: a locale missing a key falls back to it,
and an unknown locale falls back to English entirely.
"""

from typing import Dict

DEFAULT_LOCALE = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "start": (
            "👋 Hi! I keep track of who lives in which apartment.\n\n"
            "Register yourself with /setapt <number> and look up your "
            "neighbours with /aptcontacts <number>.\n"
            "See /help for all commands."
        ),
        "help": (
            "📖 Commands:\n"
            "/setapt <number> — register or change your apartment\n"
            "/aptcontacts <number> — who lives in that apartment\n"
            "/aptslist — send me the full list of residents privately\n"
            "/delme — remove your record from this chat\n"
            "/help — this help\n\n"
            "To receive /aptslist, open a private chat with me and press "
            "Start first, otherwise I can't message you."
        ),
        "setapt_done": "Got it!",
        "apt_number_missing": "Please provide an apartment number, e.g. /setapt 12",
        "apt_number_single": "Please provide exactly one apartment number",
        "apt_number_invalid": "Apartment number is incorrect",
        "no_sender": "Sorry, I cannot tell who you are",
        "nobody_in_apartment": "Nobody lives here :)",
        "nobody_in_chat": "Nobody from this chat has registered an apartment yet",
        "list_sending": "I'm sending you the list of residents in a private message",
        "batch_busy": "I'm busy sending a list right now, please try again later",
        "farewell": "Bye! Your record has been removed",
        "not_understood": "Sorry, I didn't understand that. Try /help",
        "generic_failure": "Sorry, something went wrong :(",
        "contact_placeholder": "resident",
        "apartment_prefix": "apt",
    },
    "ru": {
        "start": (
            "👋 Привет! Я помню, кто в какой квартире живёт.\n\n"
            "Запишитесь командой /setapt <номер>, а соседей ищите через "
            "/aptcontacts <номер>.\n"
            "Все команды — /help."
        ),
        "help": (
            "📖 Команды:\n"
            "/setapt <номер> — указать или изменить свою квартиру\n"
            "/aptcontacts <номер> — кто живёт в этой квартире\n"
            "/aptslist — прислать полный список жильцов в личку\n"
            "/delme — удалить свою запись в этом чате\n"
            "/help — эта справка\n\n"
            "Чтобы получить /aptslist, откройте личный чат со мной и нажмите "
            "Start, иначе я не смогу вам написать."
        ),
        "setapt_done": "Записал!",
        "apt_number_missing": "Укажите номер квартиры, например /setapt 12",
        "apt_number_single": "Укажите только один номер квартиры",
        "apt_number_invalid": "Неправильный номер квартиры",
        "no_sender": "Не могу понять, кто вы",
        "nobody_in_apartment": "Здесь никто не живёт :)",
        "nobody_in_chat": "В этом чате ещё никто не указал квартиру",
        "list_sending": "Отправляю список жильцов вам в личные сообщения",
        "batch_busy": "Сейчас я занят отправкой списка, попробуйте позже",
        "farewell": "Пока! Ваша запись удалена",
        "not_understood": "Не понял. Попробуйте /help",
        "generic_failure": "Что-то пошло не так :(",
        "contact_placeholder": "жилец",
        "apartment_prefix": "кв",
    },
}


class MessageCatalog:
    """Locale-bound view over MESSAGES."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale if locale in MESSAGES else DEFAULT_LOCALE
        self._messages = MESSAGES[self.locale]

    def get(self, key: str) -> str:
        if key in self._messages:
            return self._messages[key]
        return MESSAGES[DEFAULT_LOCALE][key]

    __getitem__ = get


def get_catalog(locale: str = DEFAULT_LOCALE) -> MessageCatalog:
    return MessageCatalog(locale)
