"""Database operations for the ufa_notifications queue."""

from datetime import datetime, timezone
from typing import Any

from app.db.supabase_client import get_supabase


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def enqueue_notification(tenant_id: str, type: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Queue a notification as pending."""
    supabase = get_supabase()
    row = {
        "tenant_id": tenant_id,
        "type": type,
        "payload": payload,
        "status": "pending",
        "attempt_count": 0,
        "created_at": _now(),
    }
    result = supabase.table("ufa_notifications").insert(row).execute()
    if not result.data:
        raise ValueError("No data returned from ufa_notifications insert")
    return result.data[0]


def list_pending_notifications(max_attempts: int = 3, limit: int = 50) -> list[dict[str, Any]]:
    """Pending notifications still under the attempt limit, oldest first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_notifications")
        .select("*")
        .eq("status", "pending")
        .lt("attempt_count", max_attempts)
        .order("created_at")
        .limit(limit)
        .execute()
    )
    return result.data or []


def list_tenant_pending_notifications(tenant_id: str, limit: int = 10) -> list[dict[str, Any]]:
    supabase = get_supabase()
    result = (
        supabase.table("ufa_notifications")
        .select("*")
        .eq("tenant_id", tenant_id)
        .eq("status", "pending")
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []


def mark_notification_sent(notification_id: str) -> None:
    supabase = get_supabase()
    supabase.table("ufa_notifications").update(
        {"status": "sent", "last_attempt": _now()}
    ).eq("id", notification_id).execute()


def mark_notification_failed_attempt(notification_id: str, attempt_count: int, max_attempts: int = 3) -> None:
    """Count a failed send. The notification is failed for good once it reaches max_attempts."""
    attempts = attempt_count + 1
    supabase = get_supabase()
    supabase.table("ufa_notifications").update(
        {
            "attempt_count": attempts,
            "last_attempt": _now(),
            "status": "failed" if attempts >= max_attempts else "pending",
        }
    ).eq("id", notification_id).execute()


def list_recent_notifications(tenant_id: str, limit: int = 10) -> list[dict[str, Any]]:
    """A tenant's notifications of any status, newest first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_notifications")
        .select("*")
        .eq("tenant_id", tenant_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []
