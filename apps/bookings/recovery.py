"""Follow-up suggestions for clients whose booking was declined or expired.

Three kinds of suggestion are produced, in this order:

* ``EXTEND_DJ`` - a DJ already confirmed for the same event day extends
  their set to cover the gap;
* ``NEW_DJ`` - the best-matching free DJ for the same slot;
* ``REFUND`` - only when nothing else can be offered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from django.db import transaction  # type: ignore

from apps.notifications.models import Notification
from apps.notifications.services import create_in_app_notification
from apps.users.models import DjProfile
from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError

from .availability import get_available_djs
from .models import Booking, BookingRecovery
from .services import lock_queryset_if_possible

logger = logging.getLogger(__name__)


@dataclass
class RecoverySuggestion:
    recovery_type: str
    message: str
    action_url: str = ""
    suggested_dj: DjProfile | None = None
    target_booking: Booking | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.recovery_type, "message": self.message, "action_url": self.action_url}
        if self.suggested_dj is not None:
            data["suggested_dj"] = {
                "id": self.suggested_dj.pk,
                "stage_name": self.suggested_dj.stage_name,
                "genres": self.suggested_dj.genres,
                "base_price_cents": self.suggested_dj.base_price_cents,
            }
        return data


def _slot_label(booking: Booking) -> str:
    if booking.start_time and booking.end_time:
        return f"{booking.start_time:%H:%M} to {booking.end_time:%H:%M}"
    return "the same time"


def _genre_matches(dj: DjProfile, preferred: list[str]) -> int:
    return len([genre for genre in dj.genres or [] if genre in preferred])


def get_sibling_bookings(booking: Booking):
    """Active bookings of the same client on the same event day."""

    return (
        Booking.objects.filter(
            client_id=booking.client_id,
            event_date__date=booking.event_date.date(),
            status__in=Booking.ACTIVE_STATUSES,
        )
        .exclude(pk=booking.pk)
        .select_related("dj")
    )


def generate_recovery_suggestions(booking: Booking, siblings: Iterable[Booking]) -> list[RecoverySuggestion]:
    siblings = list(siblings)
    suggestions: list[RecoverySuggestion] = []

    for sibling in siblings:
        if sibling.status != Booking.Status.CONFIRMED or sibling.dj is None:
            continue
        if sibling.dj.base_price_cents is None:
            continue
        suggestions.append(
            RecoverySuggestion(
                recovery_type=BookingRecovery.RecoveryType.EXTEND_DJ,
                message=f"Extend {sibling.dj.stage_name}'s time to cover the gap from {_slot_label(booking)}",
                action_url=f"/dashboard/client/extend-dj?bookingId={sibling.pk}",
                suggested_dj=sibling.dj,
                target_booking=sibling,
            )
        )

    if booking.start_time and booking.end_time:
        excluded = {sibling.dj_id for sibling in siblings if sibling.dj_id}
        if booking.dj_id:
            excluded.add(booking.dj_id)

        candidates = [
            dj
            for dj in get_available_djs(booking.start_time, booking.end_time)
            if dj.pk not in excluded and dj.base_price_cents is not None
        ]
        preferred = (booking.details or {}).get("preferred_genres") or []
        if preferred:
            candidates.sort(key=lambda dj: _genre_matches(dj, preferred), reverse=True)

        if candidates:
            best = candidates[0]
            message = f"Replace with {best.stage_name} for the same time slot ({_slot_label(booking)})"
            matching = [genre for genre in best.genres or [] if genre in preferred][:2]
            if matching:
                message += f" - Specializes in {', '.join(matching)}"
            suggestions.append(
                RecoverySuggestion(
                    recovery_type=BookingRecovery.RecoveryType.NEW_DJ,
                    message=message,
                    action_url=f"/book?djId={best.pk}&eventDate={booking.event_date:%Y-%m-%d}&recovery=true",
                    suggested_dj=best,
                )
            )
    else:
        logger.info(f"Booking {booking.pk} has no time slot, skipping replacement DJ search")

    if not suggestions:
        suggestions.append(
            RecoverySuggestion(
                recovery_type=BookingRecovery.RecoveryType.REFUND,
                message="No suitable DJs available for this time slot. We can process a refund for the rejected booking.",
                action_url=f"/dashboard/client/refund?bookingId={booking.pk}",
            )
        )

    return suggestions


def handle_booking_rejection(booking_id, reason: str) -> list[BookingRecovery]:
    """
    Persist recovery suggestions for a rejected booking and notify the client.

    Returns:
        list: created ``BookingRecovery`` records (empty if the booking is gone)
    """
    booking = Booking.objects.select_related("client", "dj").filter(pk=booking_id).first()
    if booking is None:
        logger.error(f"Booking {booking_id} not found for rejection handling")
        return []

    suggestions = generate_recovery_suggestions(booking, get_sibling_bookings(booking))

    with transaction.atomic():
        recoveries = [
            BookingRecovery.objects.create(
                original_booking=booking,
                recovery_type=suggestion.recovery_type,
                suggested_dj=suggestion.suggested_dj,
                target_booking=suggestion.target_booking,
                message=suggestion.message,
                action_url=suggestion.action_url,
            )
            for suggestion in suggestions
        ]

        dj_name = booking.dj.stage_name if booking.dj_id else "DJ"
        create_in_app_notification(
            user=booking.client,
            notification_type=Notification.Type.BOOKING_REJECTED,
            title="DJ Booking Rejected",
            message=(
                f"Your booking with {dj_name} has been rejected. "
                "We have some suggestions to help you recover."
            ),
            data={
                "booking_id": booking.pk,
                "rejected_dj_id": booking.dj_id,
                "rejected_dj_name": booking.dj.stage_name if booking.dj_id else None,
                "reason": reason,
                "suggestions": [suggestion.as_dict() for suggestion in suggestions],
                "event_date": booking.event_date.isoformat(),
                "event_type": booking.event_type,
            },
            action_url=f"/dashboard/client/recovery?bookingId={booking.pk}",
        )

    logger.info(f"Created {len(recoveries)} recovery suggestions for booking {booking.pk}")
    return recoveries


# ============================================================================
# CLIENT RESPONSES
# ============================================================================

def _lock_pending_recovery(recovery_id) -> BookingRecovery:
    try:
        recovery = lock_queryset_if_possible(BookingRecovery.objects.all()).get(pk=recovery_id)
    except (BookingRecovery.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Recovery suggestion not found")
    if recovery.status != BookingRecovery.Status.PENDING:
        raise ConflictError(f"Recovery suggestion is already {recovery.status}")
    return recovery


def _extend_dj_booking(recovery: BookingRecovery) -> None:
    target = recovery.target_booking
    gap_end = recovery.original_booking.end_time
    if target is None or gap_end is None:
        logger.warning(f"Recovery {recovery.pk} has nothing to extend")
        return
    if target.end_time is None or gap_end > target.end_time:
        target.end_time = gap_end
        target.save(update_fields=["end_time", "updated_at"])
        logger.info(f"Booking {target.pk} extended to {gap_end}")


def _create_new_dj_booking(recovery: BookingRecovery) -> Booking:
    if recovery.suggested_dj is None:
        raise ValidationError("The suggested DJ is no longer available")

    original = recovery.original_booking
    booking = Booking.objects.create(
        client=original.client,
        dj=recovery.suggested_dj,
        event_type=original.event_type,
        event_date=original.event_date,
        start_time=original.start_time,
        end_time=original.end_time,
        message=original.message,
        package_key=original.package_key,
        quoted_price_cents=original.quoted_price_cents,
        details=original.details,
        status=Booking.Status.PENDING,
    )
    create_in_app_notification(
        user=recovery.suggested_dj.user,
        notification_type=Notification.Type.GENERAL,
        title="New Booking Request",
        message=f"You have a new {booking.event_type} request on {booking.event_date:%Y-%m-%d}.",
        data={"booking_id": booking.pk},
        action_url=f"/dashboard/bookings/{booking.pk}",
    )
    logger.info(f"Replacement booking {booking.pk} created from recovery {recovery.pk}")
    return booking


def _process_refund(recovery: BookingRecovery) -> None:
    original = recovery.original_booking
    create_in_app_notification(
        user=original.client,
        notification_type=Notification.Type.REFUND_PROCESSED,
        title="Refund Processed",
        message="Your refund has been processed for the rejected booking.",
        data={"booking_id": original.pk, "amount": original.quoted_price_cents},
    )


def accept_recovery_suggestion(recovery_id, client_response: str = "") -> BookingRecovery:
    """Carry out a pending suggestion and mark it ACCEPTED."""

    with transaction.atomic():
        recovery = _lock_pending_recovery(recovery_id)

        if recovery.recovery_type == BookingRecovery.RecoveryType.EXTEND_DJ:
            _extend_dj_booking(recovery)
        elif recovery.recovery_type == BookingRecovery.RecoveryType.NEW_DJ:
            _create_new_dj_booking(recovery)
        else:
            _process_refund(recovery)

        recovery.status = BookingRecovery.Status.ACCEPTED
        recovery.client_response = client_response
        recovery.save(update_fields=["status", "client_response", "updated_at"])

    logger.info(f"Recovery {recovery.pk} ({recovery.recovery_type}) accepted")
    return recovery


def decline_recovery_suggestion(recovery_id, client_response: str = "") -> BookingRecovery:
    with transaction.atomic():
        recovery = _lock_pending_recovery(recovery_id)
        recovery.status = BookingRecovery.Status.DECLINED
        recovery.client_response = client_response
        recovery.save(update_fields=["status", "client_response", "updated_at"])

    logger.info(f"Recovery {recovery.pk} declined")
    return recovery
