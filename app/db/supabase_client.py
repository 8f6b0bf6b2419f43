"""Supabase client for tenant, UFA and knowledge-base tables."""

import os
from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings

SUPABASE_ENV = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")


def missing_supabase_env() -> list[str]:
    """Names of Supabase env vars that are unset or empty.

    Batch scripts check this before touching settings so a misconfigured
    cron run exits cleanly instead of failing validation mid-import.
    """
    return [name for name in SUPABASE_ENV if not os.environ.get(name)]


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Service-role Supabase client, created once per process.

    Raises:
        RuntimeError: If settings are missing or the client cannot be created
    """
    try:
        settings = get_settings()
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        raise RuntimeError(f"Supabase unavailable: {e}") from e
