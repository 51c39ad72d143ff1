from supabase import Client, ClientOptions, create_client
from hub.config import settings


class SupabaseClient:
    @staticmethod
    def create(use_service_role: bool = True) -> Client:
        """Build a fresh client. Sessions are never persisted, so handles don't leak auth state between requests."""
        key = settings.supabase_key
        if use_service_role and settings.supabase_service_role_key:
            key = settings.supabase_service_role_key
        return create_client(
            settings.supabase_url,
            key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )


def get_supabase() -> Client:
    return SupabaseClient.create()
