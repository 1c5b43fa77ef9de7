"""Response deadlines for pending bookings and the sweep that expires them."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking
from .services import expire_booking

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    processed: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {"processed": self.processed, "failed": self.failed, "errors": self.errors}


def _timeout_hours(booking: Booking, now: datetime) -> int:
    """Urgent events (within the urgent window of ``now``) get the shorter timeout."""

    urgent_window = timedelta(days=settings.BOOKING_URGENT_WINDOW_DAYS)
    if booking.event_date - now <= urgent_window:
        return settings.BOOKING_URGENT_TIMEOUT_HOURS
    return settings.BOOKING_PENDING_TIMEOUT_HOURS


def get_booking_deadline(booking: Booking, *, now: datetime | None = None) -> datetime:
    now = now or timezone.now()
    return booking.created_at + timedelta(hours=_timeout_hours(booking, now))


def is_booking_expired(booking: Booking, *, now: datetime | None = None) -> bool:
    now = now or timezone.now()
    return now > get_booking_deadline(booking, now=now)


def get_booking_timeout_info(booking: Booking, *, now: datetime | None = None) -> dict[str, Any]:
    """
    Display data for the response deadline.

    Returns:
        dict: is_expired, seconds_left, time_left_formatted, deadline
    """
    now = now or timezone.now()
    deadline = get_booking_deadline(booking, now=now)
    seconds_left = (deadline - now).total_seconds()

    if seconds_left <= 0:
        return {
            "is_expired": True,
            "seconds_left": 0,
            "time_left_formatted": "Expired",
            "deadline": deadline,
        }

    hours_left = math.ceil(seconds_left / 3600)
    days_left = math.ceil(hours_left / 24)
    formatted = f"{days_left} days" if days_left > 1 else f"{hours_left} hours"

    return {
        "is_expired": False,
        "seconds_left": int(seconds_left),
        "time_left_formatted": formatted,
        "deadline": deadline,
    }


def get_expired_pending_bookings(now: datetime | None = None) -> list[Booking]:
    now = now or timezone.now()
    pending = Booking.objects.filter(status=Booking.Status.PENDING).select_related("client", "dj")
    return [booking for booking in pending if is_booking_expired(booking, now=now)]


def process_expired_pending_bookings(now: datetime | None = None) -> SweepResult:
    """
    Expire every pending booking past its deadline.

    Each booking is handled on its own; a failure is logged and collected
    and the sweep moves on. Running it twice in a row is a no-op the second
    time.
    """
    now = now or timezone.now()
    result = SweepResult()

    expired = get_expired_pending_bookings(now)
    logger.info(f"Found {len(expired)} expired pending bookings")

    for booking in expired:
        try:
            if expire_booking(booking.pk, now=now):
                result.processed += 1
        except Exception as e:
            result.failed += 1
            result.errors.append(f"Booking {booking.pk}: {e}")
            logger.error(f"Error expiring booking {booking.pk}: {e}", exc_info=True)

    if result.processed or result.failed:
        logger.info(f"Timeout sweep done: processed={result.processed} failed={result.failed}")

    return result
