"""
JobNest Core - Supabase Client.

Provides the configured Supabase client backing the users store.
"""

import logging
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from jobnest.config import get_settings
from jobnest.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase_client() -> Client:
    """
    Get configured Supabase client.

    Uses the service role key: the server writes user records directly,
    with no end-user session attached to the client.
    Cached to reuse the same client instance.
    """
    settings = get_settings()
    try:
        return create_client(
            supabase_url=settings.supabase.url,
            supabase_key=settings.supabase.service_role_key,
            options=ClientOptions(
                postgrest_client_timeout=settings.supabase.timeout_seconds,
                auto_refresh_token=False,
                persist_session=False,
            ),
        )
    except Exception as e:
        logger.error("Supabase client init failed: %s", e)
        raise StoreUnavailableException("connect") from e
