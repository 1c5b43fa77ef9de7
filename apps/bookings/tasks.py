"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task  # type: ignore

from .timeouts import process_expired_pending_bookings

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.process_expired_bookings")
def process_expired_bookings() -> dict[str, Any]:
    """
    Expire pending bookings whose DJ did not respond in time.

    Scheduled hourly through Celery Beat.

    Returns:
        dict: {"processed": n, "failed": n, "errors": [...]}
    """
    result = process_expired_pending_bookings()

    if result.failed:
        logger.warning(f"Timeout sweep finished with {result.failed} failures")

    return result.as_dict()
