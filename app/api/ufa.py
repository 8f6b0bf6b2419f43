"""API endpoints for the Unified Funding Agent."""

import asyncio
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from app.core.config import get_settings
from app.core.grants_gov_learning import GrantsGovLearningIntegrator
from app.core.logging import get_logger
from app.core.sba_guide import SBABusinessGuideIntegrator
from app.core.schemas_ufa import KnowledgeRefreshRequest, UFAQueryRequest, UFAQueryResponse, UFARunRequest
from app.db.tenants import list_tenant_ids
from app.db.ufa_notifications import enqueue_notification
from app.services.ufa_agent import (
    get_intelligence_dashboard_data,
    get_tenant_status,
    run_expert_funding_analysis,
)
from app.services.ufa_query_handler import process_ufa_query

logger = get_logger(__name__)

router = APIRouter()

SCHEDULED_SUMMARY = {"type": "analysis_summary", "summary": "Scheduled analysis completed"}


# =============================================================================
# Dashboard payloads
# =============================================================================

def default_dashboard() -> dict[str, Any]:
    """Dashboard shown when the database is not reachable."""
    return {
        "aiStatus": {"state": "idle", "confidence": 85, "processing": "Standby", "nextAnalysis": "On demand"},
        "goals": [],
        "tasks": [],
        "metrics": [],
        "events": [],
        "notifications": [],
        "strategicOverview": {
            "totalOpportunities": 0,
            "highPriorityMatches": 0,
            "applicationsPending": 0,
            "successRate": 0,
            "portfolioValue": 0,
        },
        "sbaIntelligence": None,
        "dataSource": "Default (Database not configured)",
        "dataQuality": "DEMO",
    }


def sba_dashboard_snapshot() -> dict[str, Any]:
    """Static SBA panel for the dashboard."""
    return {
        "readiness_assessment": {
            "sba_loan_readiness": 72,
            "business_plan_readiness": 85,
            "financial_readiness": 68,
            "credit_readiness": 75,
        },
        "recommended_programs": [
            {
                "name": "7(a) Loan Program",
                "strategic_value": 4,
                "max_amount": 5000000,
                "description": "Most flexible SBA loan program for working capital and expansion",
            },
            {
                "name": "SBIR/STTR Innovation Funding",
                "strategic_value": 5,
                "max_amount": 1750000,
                "description": "Non-dilutive funding for innovation and R&D",
            },
            {
                "name": "SBA Microloan Program",
                "strategic_value": 3,
                "max_amount": 50000,
                "description": "Small loans for startup and early-stage businesses",
            },
        ],
        "business_guidance": {
            "next_steps": [
                "Complete comprehensive SBA readiness assessment",
                "Gather required financial documentation and tax returns",
                "Identify target SBA lenders and programs",
                "Develop relationship with SBA resource partners",
                "Create detailed business plan and financial projections",
            ],
            "key_insights": [
                "Strong growth potential identified in your industry sector",
                "SBA loan programs well-aligned with your business model",
                "Innovation focus creates excellent SBIR/STTR opportunities",
                "Consider SBA 504 program for real estate or equipment financing",
            ],
        },
        "success_probability": 74,
        "market_intelligence": {
            "trending_sectors": [
                {"name": "Technology Innovation", "growth": 23},
                {"name": "Healthcare Solutions", "growth": 18},
                {"name": "Clean Energy", "growth": 31},
            ],
            "funding_trends": [
                "Increased focus on small business resilience",
                "Growing emphasis on technology adoption",
                "Strong support for veteran and minority-owned businesses",
            ],
        },
    }


# =============================================================================
# Analysis runs
# =============================================================================

async def _run_tenant(tenant_id: str) -> dict[str, Any]:
    result = await run_expert_funding_analysis(tenant_id)
    if result.get("ok"):
        await asyncio.to_thread(enqueue_notification, tenant_id, "analysis_summary", dict(SCHEDULED_SUMMARY))
    return result


async def _run(tenant_id: str | None, limit: int) -> dict[str, Any]:
    try:
        if tenant_id:
            return {"tenantId": tenant_id, "result": await _run_tenant(tenant_id)}

        try:
            tenants = await asyncio.to_thread(list_tenant_ids, limit)
        except Exception as e:
            logger.error(f"Failed to list tenants: {e}")
            raise HTTPException(status_code=500, detail="failed to list tenants")

        results = []
        for tenant in tenants:
            result = await _run_tenant(tenant)
            results.append({"tenant": tenant, "ok": result.get("ok", False)})

        return {"processed": len(results), "results": results}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("UFA run failed")
        raise HTTPException(status_code=500, detail=f"UFA run failed: {e}")


@router.post("/ufa/run")
async def run_ufa(request: UFARunRequest) -> dict:
    """
    Run the expert analysis for one tenant, or for every tenant in profiles.

    Returns:
        {tenantId, result} for a single tenant, else {processed, results: [{tenant, ok}]}
    """
    return await _run(request.tenantId, request.limit)


@router.get("/ufa/run")
async def run_ufa_scheduled(
    tenantId: str | None = Query(None, description="Tenant to analyze"),
    limit: int = Query(1000, ge=1, description="Max tenants when running all"),
) -> dict:
    """Cron-friendly trigger, same behavior as POST."""
    return await _run(tenantId, limit)


# =============================================================================
# Status and dashboard
# =============================================================================

@router.get("/ufa/status")
async def ufa_status(tenantId: str | None = Query(None, description="Tenant")) -> dict:
    if not tenantId:
        raise HTTPException(status_code=400, detail="tenantId required")

    try:
        return await get_tenant_status(tenantId)
    except Exception as e:
        logger.exception(f"Failed to load UFA status for tenant {tenantId}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/ufa/intelligence")
async def ufa_intelligence(tenantId: str | None = Query(None, description="Tenant")) -> dict:
    """
    Dashboard data for a tenant.

    Falls back to a default dashboard when the database is unavailable.
    """
    if not tenantId:
        raise HTTPException(status_code=400, detail="tenantId required")

    try:
        dashboard = await get_intelligence_dashboard_data(tenantId)
        if dashboard.get("error"):
            logger.error(f"Dashboard data error for tenant {tenantId}: {dashboard['error']}")
            return default_dashboard()

        sba = sba_dashboard_snapshot() if get_settings().ENABLE_SBA_INTELLIGENCE else None
        return {
            **dashboard,
            "sbaIntelligence": sba,
            "dataSource": "Enhanced UFA Intelligence",
            "dataQuality": "ENHANCED" if sba else "STANDARD",
            "analysisTimestamp": datetime.now(timezone.utc).isoformat(),
        }

    except Exception as e:
        logger.exception(f"UFA intelligence failed for tenant {tenantId}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {e}")


# =============================================================================
# Queries and knowledge
# =============================================================================

@router.post("/ufa/query", response_model=UFAQueryResponse, response_model_exclude_none=True)
async def ufa_query(request: UFAQueryRequest) -> dict:
    """Answer a natural-language funding question."""
    return await process_ufa_query(
        request.tenantId,
        request.query,
        {"userProfile": request.userProfile, "projectContext": request.projectContext},
    )


@router.post("/ufa/knowledge/refresh")
async def refresh_knowledge(request: KnowledgeRefreshRequest) -> dict:
    """
    Rebuild the SBA and/or grants.gov knowledge bases by scraping.

    Returns:
        {success, results: {sba?, grantsGov?}}
    """
    results: dict[str, Any] = {}
    if request.sba:
        results["sba"] = await SBABusinessGuideIntegrator().build_sba_knowledge_base()
    if request.grantsGov:
        results["grantsGov"] = await GrantsGovLearningIntegrator().build_ufa_knowledge_base()

    return {"success": all(r.get("success") for r in results.values()), "results": results}
