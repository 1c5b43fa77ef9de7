"""DJ availability checks for booking slots."""

from __future__ import annotations

import logging
from datetime import datetime

from django.db.models import Q  # type: ignore

from apps.users.models import DjProfile

from .models import Booking

logger = logging.getLogger(__name__)


def overlapping_bookings(dj: DjProfile, start: datetime, end: datetime, *, exclude_booking_id=None):
    """Active bookings of ``dj`` whose slot intersects ``[start, end)``."""

    qs = Booking.objects.filter(
        dj=dj,
        status__in=Booking.ACTIVE_STATUSES,
    ).filter(Q(start_time__lt=end) & Q(end_time__gt=start))

    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs


def is_dj_available(dj: DjProfile, start: datetime, end: datetime, *, exclude_booking_id=None) -> bool:
    """True when the DJ has no active booking overlapping the slot."""

    conflicts = overlapping_bookings(dj, start, end, exclude_booking_id=exclude_booking_id)
    if conflicts.exists():
        logger.debug(f"DJ {dj.pk} has {conflicts.count()} conflicting bookings for {start} - {end}")
        return False
    return True


def get_available_djs(start: datetime, end: datetime) -> list[DjProfile]:
    """Bookable DJs (approved, active, accepting bookings) free for the slot."""

    busy_dj_ids = (
        Booking.objects.filter(status__in=Booking.ACTIVE_STATUSES, dj__isnull=False)
        .filter(Q(start_time__lt=end) & Q(end_time__gt=start))
        .values_list("dj_id", flat=True)
    )
    return list(DjProfile.bookable().exclude(pk__in=busy_dj_ids))
