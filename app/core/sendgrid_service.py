"""Outbound email through SendGrid dynamic templates.

UFA notifications are rendered by SendGrid templates; this module only picks
the template and fills its dynamic data.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

STRATEGIC_UPDATE_TEMPLATE_ID = "d-strategic-update-template-id"
URGENT_ALERT_TEMPLATE_ID = "d-urgent-alert-template-id"
GENERAL_TEMPLATE_ID = "d-general-notification-template-id"

DEFAULT_ORG_NAME = "Your Organization"


def dashboard_url() -> str:
    return f"{get_settings().APP_URL.rstrip('/')}/ufa"


def build_template(
    notification_type: str, payload: dict[str, Any], org_name: str
) -> tuple[str, dict[str, Any]]:
    """
    Pick the SendGrid template and dynamic data for a notification.

    Returns:
        (template_id, dynamic_template_data)
    """
    payload = payload or {}

    if notification_type == "strategic_update":
        performance = payload.get("performance") or {}
        return STRATEGIC_UPDATE_TEMPLATE_ID, {
            "org_name": org_name,
            "date": datetime.now(timezone.utc).strftime("%m/%d/%Y"),
            "success_rate": performance.get("success_rate"),
            "portfolio_value": f"{(performance.get('portfolio_value') or 0) / 1_000_000:.1f}",
            "ai_confidence": f"{float(payload.get('ai_confidence') or 0):.1f}",
            "insights": payload.get("insights") or [],
            "dashboard_url": dashboard_url(),
        }

    if notification_type == "urgent_deadline_alert":
        opportunities = payload.get("opportunities") or []
        return URGENT_ALERT_TEMPLATE_ID, {
            "org_name": org_name,
            "opportunity_count": len(opportunities),
            "opportunities": opportunities,
            "dashboard_url": dashboard_url(),
        }

    return GENERAL_TEMPLATE_ID, {
        "org_name": org_name,
        "subject": payload.get("subject") or "UFA Notification",
        "message": payload.get("summary") or "UFA analysis completed",
        "dashboard_url": dashboard_url(),
    }


async def send_template_email(
    to: str | list[str],
    template_id: str,
    dynamic_data: dict[str, Any],
) -> dict[str, Any]:
    """
    Send one templated email to all recipients.

    Args:
        to: Single email or list of emails
        template_id: SendGrid dynamic template id
        dynamic_data: Template substitutions

    Returns:
        Dict with message_id and status

    Raises:
        ValueError: If SENDGRID_API_KEY is not configured
        httpx.HTTPStatusError: If SendGrid rejects the request
    """
    settings = get_settings()

    if not settings.SENDGRID_API_KEY:
        raise ValueError("SENDGRID_API_KEY not configured")

    to_list = [to] if isinstance(to, str) else to
    payload = {
        "personalizations": [
            {
                "to": [{"email": email} for email in to_list],
                "dynamic_template_data": dynamic_data,
            }
        ],
        "from": {"email": settings.SENDGRID_FROM_EMAIL, "name": settings.SENDGRID_FROM_NAME},
        "template_id": template_id,
    }

    async with httpx.AsyncClient(timeout=15) as client:
        response = await client.post(
            SENDGRID_API_URL,
            headers={
                "Authorization": f"Bearer {settings.SENDGRID_API_KEY}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        response.raise_for_status()

        message_id = response.headers.get("X-Message-Id", "")
        logger.info(
            f"SendGrid email sent to {len(to_list)} recipients, "
            f"template={template_id}, message_id={message_id}"
        )

        return {"message_id": message_id, "status": "sent"}
