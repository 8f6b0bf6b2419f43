"""Database operations for ufa_tasks table."""

import json
from typing import Any

from app.db.supabase_client import get_supabase


def create_tasks(tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Insert strategic decision tasks.

    The metadata column is text, so dict metadata is stored as a JSON string.
    """
    if not tasks:
        return []
    rows = [
        {**task, "metadata": json.dumps(task["metadata"])} if isinstance(task.get("metadata"), dict) else task
        for task in tasks
    ]
    supabase = get_supabase()
    result = supabase.table("ufa_tasks").insert(rows).execute()
    if not result.data:
        raise ValueError("No data returned from ufa_tasks insert")
    return result.data


def list_open_tasks(tenant_id: str, limit: int = 10) -> list[dict[str, Any]]:
    """Tasks that are not completed, newest first."""
    supabase = get_supabase()
    result = (
        supabase.table("ufa_tasks")
        .select("*")
        .eq("tenant_id", tenant_id)
        .neq("status", "completed")
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []


def list_tasks_by_status(tenant_id: str, status: str, limit: int = 10) -> list[dict[str, Any]]:
    supabase = get_supabase()
    result = (
        supabase.table("ufa_tasks")
        .select("*")
        .eq("tenant_id", tenant_id)
        .eq("status", status)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []
