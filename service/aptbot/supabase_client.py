from supabase import create_client, Client
from aptbot.config import get_settings


def get_supabase_admin() -> Client:
    """Service role client — bypasses RLS, for server-side operations."""
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )
