"""Database operations for ufa_events and ufa_analysis_events tables."""

from datetime import datetime, timezone
from typing import Any

from app.db.supabase_client import get_supabase


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def record_event(tenant_id: str, event_type: str, details: dict[str, Any]) -> dict[str, Any]:
    """Record an agent activity event shown on the dashboard feed."""
    supabase = get_supabase()
    row = {"tenant_id": tenant_id, "event_type": event_type, "details": details, "created_at": _now()}
    result = supabase.table("ufa_events").insert(row).execute()
    return result.data[0] if result.data else row


def record_analysis_event(tenant_id: str, event_type: str, event_data: dict[str, Any]) -> dict[str, Any]:
    """Record the outcome of an analysis run."""
    supabase = get_supabase()
    row = {"tenant_id": tenant_id, "event_type": event_type, "event_data": event_data, "created_at": _now()}
    result = supabase.table("ufa_analysis_events").insert(row).execute()
    return result.data[0] if result.data else row


def list_events(tenant_id: str, limit: int = 15) -> list[dict[str, Any]]:
    """List a tenant's events, newest first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_events")
        .select("*")
        .eq("tenant_id", tenant_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []
