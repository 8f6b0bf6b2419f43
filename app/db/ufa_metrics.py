"""Database operations for ufa_metrics table."""

from typing import Any

from app.db.supabase_client import get_supabase


def upsert_metric(tenant_id: str, key: str, value: Any) -> None:
    """Upsert one metric through the ufa_upsert_metric function, which also bumps usage_count."""
    supabase = get_supabase()
    supabase.rpc(
        "ufa_upsert_metric",
        {"p_tenant_id": tenant_id, "p_metric_key": key, "p_value": str(value)},
    ).execute()


def upsert_metrics(tenant_id: str, metrics: dict[str, Any]) -> None:
    for key, value in metrics.items():
        upsert_metric(tenant_id, key, value)


def list_metrics(tenant_id: str, limit: int = 20) -> list[dict[str, Any]]:
    """List a tenant's metrics, most recently updated first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_metrics")
        .select("metric_key, value, usage_count, updated_at")
        .eq("tenant_id", tenant_id)
        .order("updated_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []


def metrics_by_key(metrics: list[dict[str, Any]]) -> dict[str, Any]:
    return {m["metric_key"]: m.get("value") for m in metrics if m.get("metric_key")}


def list_recent_metrics(tenant_id: str, limit: int = 20) -> list[dict[str, Any]]:
    """Full metric rows, most recently updated first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_metrics")
        .select("*")
        .eq("tenant_id", tenant_id)
        .order("updated_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []
