"""UFA notification queue: builds alerts and drains pending notifications to SendGrid."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.sendgrid_service import DEFAULT_ORG_NAME, build_template, send_template_email
from app.db.tenants import get_tenant_settings
from app.db.ufa_events import record_event
from app.db.ufa_notifications import (
    enqueue_notification,
    list_pending_notifications,
    mark_notification_failed_attempt,
    mark_notification_sent,
)

logger = get_logger(__name__)

URGENT_DEADLINE_DAYS = 7
URGENT_MIN_MATCH_SCORE = 85


def _parse_deadline(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        deadline = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return deadline


def build_urgent_deadline_alert(
    opportunities: list[dict[str, Any]], now: datetime | None = None
) -> dict[str, Any] | None:
    """
    Alert payload for strong matches closing within a week.

    Returns:
        urgent_deadline_alert payload, or None when nothing qualifies
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now + timedelta(days=URGENT_DEADLINE_DAYS)

    urgent = []
    for opp in opportunities:
        deadline = _parse_deadline(opp.get("deadline"))
        if deadline is None or not (now <= deadline <= cutoff):
            continue
        if (opp.get("matchScore") or 0) <= URGENT_MIN_MATCH_SCORE:
            continue
        urgent.append(
            {
                "title": opp.get("title"),
                "value": opp.get("value") or opp.get("funding_amount"),
                "deadline": deadline.date().isoformat(),
                "match_score": opp.get("matchScore"),
            }
        )

    if not urgent:
        return None

    return {
        "type": "urgent_deadline_alert",
        "subject": f"🚨 Urgent: {len(urgent)} High-Value Opportunities Expiring Soon",
        "opportunities": urgent,
        "generated_at": now.isoformat(),
    }


def queue_urgent_deadline_alert(tenant_id: str, opportunities: list[dict[str, Any]]) -> dict[str, Any] | None:
    payload = build_urgent_deadline_alert(opportunities)
    if payload is None:
        return None
    row = enqueue_notification(tenant_id, "urgent_deadline_alert", payload)
    record_event(
        tenant_id,
        "automated_communication",
        {"type": "urgent_deadline_alert", "opportunity_count": len(payload["opportunities"])},
    )
    return row


async def send_notification(notification: dict[str, Any]) -> bool:
    """
    Email one queued notification to the tenant's recipients.

    Returns:
        False when SendGrid is not configured, True once sent

    Raises:
        Exception: Propagates send failures so the caller can count the attempt
    """
    settings = get_settings()
    if not settings.SENDGRID_API_KEY:
        logger.warning("SendGrid API key not configured, skipping email notification")
        return False

    tenant_id = notification["tenant_id"]
    tenant = await asyncio.to_thread(get_tenant_settings, tenant_id) or {}
    recipients = tenant.get("notification_emails") or [settings.DEFAULT_NOTIFICATION_EMAIL]
    org_name = tenant.get("org_name") or DEFAULT_ORG_NAME

    template_id, data = build_template(notification.get("type", ""), notification.get("payload") or {}, org_name)
    await send_template_email(recipients, template_id, data)
    logger.info(f"Email sent for notification {notification.get('id')} to {len(recipients)} recipients")
    return True


async def process_pending_notifications() -> dict[str, int]:
    """
    Drain one batch of pending notifications, oldest first.

    Returns:
        Dict with processed, sent and failed counts
    """
    settings = get_settings()
    if not settings.SENDGRID_API_KEY:
        logger.warning("SendGrid API key not configured, leaving notifications queued")
        return {"processed": 0, "sent": 0, "failed": 0}

    max_attempts = settings.NOTIFICATION_MAX_ATTEMPTS
    pending = await asyncio.to_thread(
        list_pending_notifications, max_attempts, settings.NOTIFICATION_BATCH_SIZE
    )
    logger.info(f"Processing {len(pending)} pending notifications")

    sent = failed = 0
    for notification in pending:
        notification_id = notification["id"]
        try:
            await send_notification(notification)
            await asyncio.to_thread(mark_notification_sent, notification_id)
            sent += 1
        except Exception as e:
            logger.error(f"Failed to send notification {notification_id}: {e}")
            await asyncio.to_thread(
                mark_notification_failed_attempt,
                notification_id,
                notification.get("attempt_count") or 0,
                max_attempts,
            )
            failed += 1

    return {"processed": len(pending), "sent": sent, "failed": failed}
