"""
Run the Unified Funding Agent analysis for every tenant.

Run with: uv run python scripts/ufa_worker.py [limit]
"""

import asyncio
import logging
import sys

from app.core.logging import get_logger, log_with_context
from app.db.supabase_client import missing_supabase_env
from app.db.tenants import list_tenant_ids
from app.db.ufa_notifications import enqueue_notification
from app.services.ufa_agent import run_expert_funding_analysis

logger = get_logger("ufa_worker")


def summary_payload(result: dict) -> dict:
    """analysis_summary notification for a successful run."""
    analysis = result.get("analysis") or {}
    return {
        "type": "analysis_summary",
        "summary": "Analysis completed",
        "details": {
            "strategies": len(analysis.get("expertStrategies") or []),
            "confidenceScore": analysis.get("confidenceScore"),
            "timestamp": result.get("timestamp"),
        },
    }


async def run_worker(limit: int = 1000) -> dict[str, int]:
    """
    Analyze each tenant in turn. One tenant failing does not stop the rest.

    Returns:
        Counts of tenants processed, succeeded and failed
    """
    tenants = list_tenant_ids(limit)
    logger.info(f"Found {len(tenants)} tenants")

    succeeded = failed = 0
    for tenant_id in tenants:
        try:
            log_with_context(logger, logging.INFO, "Running analysis", tenant_id=tenant_id)
            result = await run_expert_funding_analysis(tenant_id)
            if result.get("ok"):
                enqueue_notification(tenant_id, "analysis_summary", summary_payload(result))
                succeeded += 1
            else:
                failed += 1
        except Exception as e:
            logger.error(f"Error running analysis for {tenant_id}: {e}")
            failed += 1

    logger.info("UFA worker finished")
    return {"processed": len(tenants), "succeeded": succeeded, "failed": failed}


def main(argv: list[str]) -> int:
    missing = missing_supabase_env()
    if missing:
        logger.error(f"Missing {' or '.join(missing)} env vars")
        return 1

    try:
        limit = int(argv[1]) if len(argv) > 1 else 1000
        counts = asyncio.run(run_worker(limit))
    except Exception as e:
        logger.exception(f"UFA worker error: {e}")
        return 2

    print(f"Processed {counts['processed']} tenants: {counts['succeeded']} ok, {counts['failed']} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
