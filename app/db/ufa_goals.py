"""Database operations for ufa_goals table."""

from typing import Any

from app.db.supabase_client import get_supabase


def upsert_goals(goals: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Upsert strategic goals, keyed on (tenant_id, title)."""
    if not goals:
        return []
    supabase = get_supabase()
    result = supabase.table("ufa_goals").upsert(goals, on_conflict="tenant_id,title").execute()
    return result.data or []


def list_goals(tenant_id: str, limit: int = 10) -> list[dict[str, Any]]:
    """List a tenant's goals, newest first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_goals")
        .select("*")
        .eq("tenant_id", tenant_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []
