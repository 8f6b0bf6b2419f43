"""Database operations for scraped SBA and grants.gov knowledge."""

from datetime import datetime, timezone
from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

SBA_SOURCE = "sba.gov"
GRANTS_GOV_SOURCE = "grants.gov"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def upsert_sba_knowledge(category: str, data: dict[str, Any]) -> dict[str, Any]:
    """
    Store one processed SBA business guide category.

    Args:
        category: Intelligence category (e.g. funding_strategies)
        data: Dict with description, insights, funding_applications,
              ufa_integrations and strategic_recommendations

    Returns:
        Upserted row
    """
    supabase = get_supabase()

    row = {
        "category": category,
        "description": data.get("description"),
        "insights": data.get("insights", []),
        "funding_applications": data.get("funding_applications", []),
        "ufa_integrations": data.get("ufa_integrations", []),
        "strategic_recommendations": data.get("strategic_recommendations", []),
        "source": SBA_SOURCE,
        "last_updated": _now(),
    }

    response = supabase.table("ufa_sba_knowledge").upsert(row, on_conflict="category,source").execute()
    return response.data[0] if response.data else row


def upsert_sba_program(program: dict[str, Any]) -> dict[str, Any]:
    """Store one SBA funding program keyed by name."""
    supabase = get_supabase()

    row = {
        "name": program["name"],
        "description": program.get("description"),
        "eligibility_requirements": program.get("eligibility_requirements"),
        "funding_amounts": program.get("funding_amounts"),
        "program_type": program.get("program_type"),
        "business_stage_fit": program.get("business_stage_fit", []),
        "strategic_value": program.get("strategic_value"),
        "application_complexity": program.get("application_complexity"),
        "success_factors": program.get("success_factors", []),
        "link": program.get("link"),
        "last_updated": _now(),
    }

    response = supabase.table("ufa_sba_programs").upsert(row, on_conflict="name").execute()
    return response.data[0] if response.data else row


def list_sba_programs() -> list[dict[str, Any]]:
    """List stored SBA programs, highest strategic value first."""
    supabase = get_supabase()

    response = (
        supabase.table("ufa_sba_programs")
        .select("*")
        .order("strategic_value", desc=True)
        .execute()
    )
    return response.data or []


def list_sba_knowledge(categories: list[str] | None = None) -> list[dict[str, Any]]:
    """List stored SBA knowledge rows, optionally limited to some categories."""
    supabase = get_supabase()

    query = supabase.table("ufa_sba_knowledge").select("*").eq("source", SBA_SOURCE)
    if categories:
        query = query.in_("category", categories)
    response = query.execute()
    return response.data or []


def upsert_grants_knowledge(category: str, data: dict[str, Any]) -> dict[str, Any]:
    """
    Store one processed grants.gov learning category.

    Args:
        category: Intelligence category (e.g. compliance_requirements)
        data: Dict with description, insights, applications and strategic_recommendations

    Returns:
        Upserted row
    """
    supabase = get_supabase()

    row = {
        "category": category,
        "description": data.get("description"),
        "insights": data.get("insights", []),
        "applications": data.get("applications", []),
        "strategic_recommendations": data.get("strategic_recommendations", []),
        "source": GRANTS_GOV_SOURCE,
        "last_updated": _now(),
    }

    response = supabase.table("ufa_knowledge_base").upsert(row, on_conflict="category,source").execute()
    return response.data[0] if response.data else row


def list_grants_knowledge(categories: list[str] | None = None) -> list[dict[str, Any]]:
    """List stored grants.gov knowledge rows."""
    supabase = get_supabase()

    query = supabase.table("ufa_knowledge_base").select("*").eq("source", GRANTS_GOV_SOURCE)
    if categories:
        query = query.in_("category", categories)
    response = query.execute()
    return response.data or []
