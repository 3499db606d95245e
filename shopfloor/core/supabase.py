"""
Supabase client integration.

Provides the hosted store connection used by the Supabase adapters.
"""

from functools import lru_cache

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from shopfloor.core.config import settings
from shopfloor.domain.shared.exceptions import StoreError


class SupabaseClient:
    """Lazily created Supabase clients."""

    def __init__(self):
        self._admin_client: Client | None = None

    @property
    def admin(self) -> Client:
        """Get the Supabase admin client with service key (for server-side writes)."""
        if not self._admin_client:
            if not settings.supabase_enabled:
                raise StoreError("Supabase is not configured", operation="connect")
            self._admin_client = create_client(
                supabase_url=settings.SUPABASE_URL,
                supabase_key=settings.supabase_service_key,
                options=ClientOptions(
                    auto_refresh_token=False,
                    persist_session=False,
                ),
            )
        return self._admin_client


@lru_cache()
def get_supabase_client() -> SupabaseClient:
    """Get the singleton Supabase client instance."""
    return SupabaseClient()
