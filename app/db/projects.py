"""Projects database operations."""

import math
from datetime import datetime, timezone
from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

PROJECT_COLUMNS = (
    "id, name, description, project_type, status, "
    "funding_needed, funding_request_amount, total_project_budget, "
    "location, project_location, timeline, project_duration, "
    "proposed_start_date, funding_decision_needed, "
    "estimated_people_served, target_population, "
    "current_status, urgency_level, industry, "
    "created_at, updated_at"
)

NUMERIC_FIELDS = ("funding_needed", "funding_request_amount", "total_project_budget", "estimated_people_served")

TEXT_FIELDS = (
    "description",
    "location",
    "project_location",
    "timeline",
    "project_duration",
    "proposed_start_date",
    "funding_decision_needed",
    "target_population",
    "current_status",
    "industry",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_number(value: Any) -> float | None:
    """Parse a numeric form value. Blank, unparseable or non-finite input is None."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").replace("$", "").strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> int | None:
    number = parse_number(value)
    return int(number) if number is not None else None


def normalize_new_project(user_id: str, project: dict[str, Any]) -> dict[str, Any]:
    """Build an insertable projects row from submitted wizard data."""
    now = _now()
    row: dict[str, Any] = {
        "user_id": user_id,
        "name": project.get("name") or "Untitled Project",
        "project_type": project.get("project_type") or project.get("type") or None,
        "status": project.get("status") or "draft",
        "funding_needed": parse_number(project.get("funding_needed")),
        "funding_request_amount": parse_number(project.get("funding_request_amount")),
        "total_project_budget": parse_number(project.get("total_project_budget")),
        "estimated_people_served": parse_int(project.get("estimated_people_served")),
        "urgency_level": project.get("urgency_level") or "medium",
        "created_at": now,
        "updated_at": now,
    }
    for field in TEXT_FIELDS:
        row[field] = project.get(field) or None
    return row


def sanitize_project_updates(updates: dict[str, Any]) -> dict[str, Any]:
    """Blank strings become None and numeric fields are parsed."""
    sanitized: dict[str, Any] = {}
    for key, value in updates.items():
        if value == "":
            sanitized[key] = None
        elif key in NUMERIC_FIELDS:
            sanitized[key] = parse_number(value)
        else:
            sanitized[key] = value
    return sanitized


def list_projects(user_id: str) -> list[dict[str, Any]]:
    """List a user's projects, most recently updated first."""
    supabase = get_supabase()
    response = (
        supabase.table("projects")
        .select(PROJECT_COLUMNS)
        .eq("user_id", user_id)
        .order("updated_at", desc=True)
        .execute()
    )
    return response.data or []


def create_project(user_id: str, project: dict[str, Any]) -> dict[str, Any]:
    """
    Create a project for a user.

    Args:
        user_id: Owning user
        project: Raw project fields from the client

    Returns:
        Created project row

    Raises:
        ValueError: If the insert returned no row
    """
    supabase = get_supabase()

    try:
        response = supabase.table("projects").insert(normalize_new_project(user_id, project)).execute()
        if not response.data:
            raise ValueError("No data returned from create_project")

        created = response.data[0]
        logger.info(
            f"Created project {created.get('id')}: {created.get('name')}",
            extra={"project_id": created.get("id"), "user_id": user_id},
        )
        return created

    except Exception as e:
        logger.error(f"Failed to create project for user {user_id}: {e}")
        raise


def update_project(user_id: str, project_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Update one of a user's projects.

    Raises:
        ValueError: If no project matches both id and user
    """
    supabase = get_supabase()

    payload = {**sanitize_project_updates(updates), "updated_at": _now()}
    response = (
        supabase.table("projects")
        .update(payload)
        .eq("id", project_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not response.data:
        raise ValueError(f"Project not found: {project_id}")
    return response.data[0]


def delete_project(user_id: str, project_id: str) -> None:
    supabase = get_supabase()
    supabase.table("projects").delete().eq("id", project_id).eq("user_id", user_id).execute()
    logger.info(f"Deleted project {project_id}", extra={"project_id": project_id, "user_id": user_id})
