"""Database operations for tenant lookup and tenant notification settings."""

from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def list_tenant_ids(limit: int = 1000) -> list[str]:
    """
    Tenants to analyze, read from profiles.

    A profile's tenant_id is used when set, otherwise its own id.
    """
    supabase = get_supabase()
    response = supabase.table("profiles").select("id, tenant_id").limit(limit).execute()
    tenant_ids = []
    for row in response.data or []:
        tenant_id = row.get("tenant_id") or row.get("id")
        if tenant_id:
            tenant_ids.append(str(tenant_id))
    return tenant_ids


def get_tenant_settings(tenant_id: str) -> dict[str, Any] | None:
    """Notification emails and organization name for a tenant."""
    supabase = get_supabase()
    response = (
        supabase.table("tenant_settings")
        .select("notification_emails, org_name")
        .eq("tenant_id", tenant_id)
        .limit(1)
        .execute()
    )
    return response.data[0] if response.data else None
