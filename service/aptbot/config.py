from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Telegram
    telegram_bot_token: str
    telegram_webhook_secret: str = ""  # Optional: for webhook verification

    # Supabase (registry store)
    supabase_url: str
    supabase_service_role_key: str
    apartment_table: str = "apartment_info"

    # Environment
    environment: str = "development"
    bot_locale: str = "en"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # Empty: console only
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    # Batch sending (/aptslist)
    batch_message_limit: int = 4096
    batch_send_delay_ms: int = 2000
    batch_timeout_seconds: int = 600

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
