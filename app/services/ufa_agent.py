"""Unified Funding Agent orchestration.

Runs the expert analysis for a tenant, persists its outputs, and assembles the
dashboard and status payloads from the UFA tables.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from app.core.logging import get_logger
from app.core.sba_strategy import UFAExpertStrategistWithSBA
from app.db.supabase_client import get_supabase
from app.db.ufa_events import list_events, record_analysis_event, record_event
from app.db.ufa_goals import list_goals, upsert_goals
from app.db.ufa_metrics import list_metrics, list_recent_metrics, metrics_by_key, upsert_metrics
from app.db.ufa_notifications import (
    enqueue_notification,
    list_recent_notifications,
    list_tenant_pending_notifications,
)
from app.db.ufa_strategy import upsert_communications, upsert_expert_metrics, upsert_roadmap
from app.db.ufa_tasks import create_tasks, list_open_tasks, list_tasks_by_status

logger = get_logger(__name__)

ACTIVE_WINDOW = timedelta(minutes=5)
DEFAULT_CONFIDENCE = 85.0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def persist_analysis(strategist: UFAExpertStrategistWithSBA, analysis: dict[str, Any]) -> None:
    """Write one analysis run to the UFA tables and queue the strategic update."""
    tenant_id = strategist.tenant_id

    upsert_goals(strategist.build_roadmap_goals(analysis["portfolioStrategy"]))
    create_tasks(strategist.build_strategic_decision_tasks(analysis["expertStrategies"]))
    upsert_metrics(tenant_id, strategist.build_intelligence_metrics(analysis))
    upsert_expert_metrics(tenant_id, analysis["expertMetrics"])
    upsert_roadmap(tenant_id, analysis["roadmap"])
    upsert_communications(tenant_id, analysis["communications"])
    record_analysis_event(tenant_id, "expert_funding_analysis", strategist.summarize_analysis(analysis))

    update = strategist.build_strategic_update(analysis)
    enqueue_notification(tenant_id, "strategic_update", update)
    record_event(
        tenant_id,
        "automated_communication",
        {"type": "strategic_update", "insights_count": len(update["insights"])},
    )


async def run_expert_funding_analysis(
    tenant_id: str, org_profile: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Run and persist the expert funding analysis for one tenant.

    Args:
        tenant_id: Tenant to analyze
        org_profile: Business profile for SBA matching (defaults to a placeholder profile)

    Returns:
        {ok, tenantId, analysis, timestamp} or {ok: False, tenantId, error, timestamp}
    """
    logger.info(f"Starting UFA analysis for tenant {tenant_id}")

    try:
        strategist = UFAExpertStrategistWithSBA(tenant_id)
        if strategist.use_sba_intelligence:
            await strategist.initialize_sba_intelligence()

        analysis = await asyncio.to_thread(strategist.run_analysis, org_profile)
        await asyncio.to_thread(persist_analysis, strategist, analysis)

        sba = analysis["landscape"].get("sbaIntelligence") or {}
        logger.info(
            f"UFA analysis completed for tenant {tenant_id}: "
            f"{len(analysis['expertStrategies'])} strategies, "
            f"{len(sba.get('recommended_programs') or [])} SBA programs"
        )
        return {"ok": True, "tenantId": tenant_id, "analysis": analysis, "timestamp": _now()}

    except Exception as e:
        logger.exception(f"UFA analysis failed for tenant {tenant_id}")
        return {"ok": False, "tenantId": tenant_id, "error": str(e), "timestamp": _now()}


async def _read(fn: Callable[..., list[dict[str, Any]]], *args: Any) -> list[dict[str, Any]]:
    try:
        return await asyncio.to_thread(fn, *args)
    except Exception as e:
        logger.warning(f"Dashboard read {fn.__name__} failed: {e}")
        return []


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any) -> int:
    return int(_to_float(value, 0))


def _is_recent(event: dict[str, Any] | None, now: datetime) -> bool:
    if not event or not event.get("created_at"):
        return False
    try:
        created = datetime.fromisoformat(str(event["created_at"]).replace("Z", "+00:00"))
    except ValueError:
        return False
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created > now - ACTIVE_WINDOW


def build_dashboard(
    goals: list[dict[str, Any]],
    tasks: list[dict[str, Any]],
    metrics: list[dict[str, Any]],
    events: list[dict[str, Any]],
    notifications: list[dict[str, Any]],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Shape the dashboard payload. Metric values are stored as strings."""
    now = now or datetime.now(timezone.utc)
    values = metrics_by_key(metrics)
    last_event = events[0] if events else None

    return {
        "aiStatus": {
            "state": "active" if _is_recent(last_event, now) else "idle",
            "confidence": _to_float(values.get("ai_confidence"), DEFAULT_CONFIDENCE),
            "processing": last_event.get("event_type") if last_event else None,
            "nextAnalysis": None,
        },
        "goals": goals,
        "tasks": tasks,
        "metrics": metrics,
        "events": events,
        "notifications": notifications,
        "strategicOverview": {
            "totalOpportunities": _to_int(values.get("opportunities_identified")),
            "highPriorityMatches": _to_int(values.get("high_priority_matches")),
            "applicationsPending": len(tasks),
            "successRate": _to_float(values.get("success_rate"), 0.0),
            "portfolioValue": _to_int(values.get("portfolio_value")),
        },
    }


async def get_intelligence_dashboard_data(tenant_id: str) -> dict[str, Any]:
    """
    Read all dashboard sections in parallel.

    A failed section falls back to an empty list. Only an unavailable
    database yields {error}.
    """
    try:
        get_supabase()
    except Exception as e:
        logger.error(f"Dashboard database unavailable: {e}")
        return {"error": str(e)}

    goals, tasks, metrics, events, notifications = await asyncio.gather(
        _read(list_goals, tenant_id, 10),
        _read(list_open_tasks, tenant_id, 10),
        _read(list_recent_metrics, tenant_id, 20),
        _read(list_events, tenant_id, 15),
        _read(list_recent_notifications, tenant_id, 10),
    )
    return build_dashboard(goals, tasks, metrics, events, notifications)


async def get_tenant_status(tenant_id: str) -> dict[str, Any]:
    """Raw status payload: open tasks, pending notifications and metric usage."""
    goals, tasks, metrics, events, notifications = await asyncio.gather(
        asyncio.to_thread(list_goals, tenant_id, 10),
        asyncio.to_thread(list_tasks_by_status, tenant_id, "open", 10),
        asyncio.to_thread(list_metrics, tenant_id, 20),
        asyncio.to_thread(list_events, tenant_id, 15),
        asyncio.to_thread(list_tenant_pending_notifications, tenant_id, 10),
    )

    return {
        "status": "active" if _is_recent(events[0] if events else None, datetime.now(timezone.utc)) else "idle",
        "goals": goals,
        "tasks": tasks,
        "metrics": [
            {"key": m.get("metric_key"), "value": m.get("value"), "usage_count": m.get("usage_count")}
            for m in metrics
        ],
        "events": events,
        "notifications": notifications,
    }
