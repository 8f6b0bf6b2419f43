"""Database operations for per-tenant strategy documents.

Covers ufa_funding_roadmaps, ufa_communications and ufa_expert_metrics.
Each holds one current row per tenant.
"""

from datetime import datetime, timezone
from typing import Any

from app.db.supabase_client import get_supabase


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def upsert_roadmap(tenant_id: str, roadmap: dict[str, Any]) -> dict[str, Any]:
    supabase = get_supabase()
    row = {"tenant_id": tenant_id, "roadmap_data": roadmap, "created_at": _now(), "status": "active"}
    result = supabase.table("ufa_funding_roadmaps").upsert(row, on_conflict="tenant_id").execute()
    return result.data[0] if result.data else row


def upsert_communications(
    tenant_id: str, communications: dict[str, Any], type: str = "strategic_analysis"
) -> dict[str, Any]:
    supabase = get_supabase()
    row = {"tenant_id": tenant_id, "communications_data": communications, "created_at": _now(), "type": type}
    result = supabase.table("ufa_communications").upsert(row, on_conflict="tenant_id,type").execute()
    return result.data[0] if result.data else row


def upsert_expert_metrics(tenant_id: str, metrics: dict[str, Any]) -> dict[str, Any]:
    supabase = get_supabase()
    row = {"tenant_id": tenant_id, **metrics}
    result = supabase.table("ufa_expert_metrics").upsert(row, on_conflict="tenant_id").execute()
    return result.data[0] if result.data else row


def get_roadmap(tenant_id: str) -> dict[str, Any] | None:
    supabase = get_supabase()
    result = (
        supabase.table("ufa_funding_roadmaps")
        .select("*")
        .eq("tenant_id", tenant_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None
