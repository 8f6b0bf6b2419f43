"""
Send one batch of pending UFA notifications through SendGrid.

Run with: uv run python scripts/process_notifications.py
"""

import asyncio
import sys

from app.core.logging import get_logger
from app.db.supabase_client import missing_supabase_env
from app.services.notification_queue import process_pending_notifications

logger = get_logger("process_notifications")


def main() -> int:
    missing = missing_supabase_env()
    if missing:
        logger.error(f"Missing {' or '.join(missing)} env vars")
        return 1

    try:
        counts = asyncio.run(process_pending_notifications())
    except Exception as e:
        logger.exception(f"Notification processing failed: {e}")
        return 2

    print(f"Processed {counts['processed']} notifications: {counts['sent']} sent, {counts['failed']} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
