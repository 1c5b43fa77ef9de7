"""Booking lifecycle services.

Every operation re-reads the booking inside ``transaction.atomic()`` before
mutating it, and writes the status change together with the in-app
notifications it causes. Emails and rejection recovery run after the commit
and never undo the status change when they fail.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications.models import Notification
from apps.notifications.services import (
    create_in_app_notification,
    send_booking_accepted_email,
    send_booking_cancelled_email,
    send_payment_received_email,
)
from apps.users.models import DjProfile
from shared.domain.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

from .models import Booking

logger = logging.getLogger(__name__)

Status = Booking.Status

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    Status.PENDING: frozenset({Status.ACCEPTED, Status.DECLINED, Status.CANCELLED}),
    Status.ACCEPTED: frozenset({Status.CONFIRMED, Status.CANCELLED}),
    Status.CONFIRMED: frozenset(),
    Status.DECLINED: frozenset(),
    Status.CANCELLED: frozenset(),
}

TIMEOUT_REASON = "DJ did not respond within the required time period"


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _get_booking_for_update(booking_id) -> Booking:
    try:
        return lock_queryset_if_possible(Booking.objects.all()).get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Booking not found")


def _is_admin(actor) -> bool:
    return actor is not None and actor.is_authenticated and actor.is_admin()


def _owns_booking(actor, booking: Booking) -> bool:
    return actor is not None and booking.dj_id is not None and booking.dj.user_id == actor.id


def _cancelled_by(actor) -> str:
    if actor is None:
        return Booking.CancelledBy.SYSTEM
    if _is_admin(actor):
        return Booking.CancelledBy.ADMIN
    if actor.is_dj():
        return Booking.CancelledBy.DJ
    return Booking.CancelledBy.CLIENT


def _apply_status(booking: Booking, new_status: str, *, now: datetime, reason: str = "", actor=None) -> None:
    """Write ``new_status`` plus the bookkeeping fields that belong to it."""

    booking.status = new_status
    update_fields = ["status", "updated_at"]

    if new_status == Status.CONFIRMED:
        booking.is_paid = True
        booking.paid_at = now
        update_fields += ["is_paid", "paid_at"]
    elif new_status in (Status.CANCELLED, Status.DECLINED):
        booking.cancelled_at = now
        booking.cancellation_reason = reason[:500]
        booking.cancelled_by = _cancelled_by(actor)
        update_fields += ["cancelled_at", "cancellation_reason", "cancelled_by"]

    booking.save(update_fields=update_fields)


def _event_label(booking: Booking) -> str:
    return f"{booking.event_type} on {booking.event_date:%Y-%m-%d}"


def _recovery_url(booking: Booking) -> str:
    return f"/dashboard/client/recovery?bookingId={booking.pk}"


def _notify_status_change(booking: Booking, new_status: str, reason: str) -> None:
    create_in_app_notification(
        user=booking.client,
        notification_type=Notification.Type.BOOKING_STATUS_CHANGED,
        title="Booking Status Updated",
        message=f"Your booking for {booking.event_type} has been updated to {new_status}. Reason: {reason}",
        data={"booking_id": booking.pk, "status": new_status},
    )
    if booking.dj_id:
        create_in_app_notification(
            user=booking.dj.user,
            notification_type=Notification.Type.BOOKING_STATUS_CHANGED,
            title="Booking Status Updated",
            message=(
                f"A booking you're assigned to ({booking.event_type}) has been updated to "
                f"{new_status}. Reason: {reason}"
            ),
            data={"booking_id": booking.pk, "status": new_status},
        )


def _run_rejection_recovery(booking_id, reason: str) -> None:
    """Invoke rejection recovery; its failures are logged, never raised."""

    from .recovery import handle_booking_rejection  # local import to avoid circular

    try:
        handle_booking_rejection(booking_id, reason)
    except Exception as e:
        logger.error(f"Rejection recovery failed for booking {booking_id}: {e}", exc_info=True)


# ============================================================================
# LIFECYCLE OPERATIONS
# ============================================================================

def transition_status(booking_id, new_status: str, actor, reason: str, *, force: bool = False) -> Booking:
    """
    Move a booking to ``new_status``.

    Without ``force`` only the transitions in ``ALLOWED_TRANSITIONS`` are
    accepted. ``force`` is the admin override: any target from a
    non-terminal state.

    Raises:
        ValidationError: unknown status or empty reason
        NotFoundError: booking does not exist
        ConflictError: transition not allowed
    """
    if new_status not in Status.values:
        raise ValidationError("Invalid status")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Reason is required")

    now = timezone.now()
    with transaction.atomic():
        booking = _get_booking_for_update(booking_id)
        old_status = booking.status
        regular = can_transition(old_status, new_status)

        if not regular:
            if not force:
                raise ConflictError(f"Cannot change booking status from {old_status} to {new_status}")
            if booking.is_terminal:
                raise ConflictError(f"Booking is already {old_status} and cannot be changed")

        _apply_status(booking, new_status, now=now, reason=reason, actor=actor)
        _notify_status_change(booking, new_status, reason)

    actor_id = getattr(actor, "id", None)
    if regular:
        logger.info(
            f"User {actor_id} changed booking {booking.pk} status from {old_status} to {new_status}. "
            f"Reason: {reason}"
        )
    else:
        logger.warning(
            f"Admin override: user {actor_id} forced booking {booking.pk} from {old_status} "
            f"to {new_status}. Reason: {reason}"
        )

    if new_status == Status.CONFIRMED:
        send_payment_received_email(booking)
    if regular and new_status in (Status.CANCELLED, Status.DECLINED):
        _run_rejection_recovery(booking.pk, reason)

    return booking


def accept_booking(booking_id, actor, *, dj_profile_id=None) -> Booking:
    """
    Accept a pending booking (PENDING -> ACCEPTED).

    The assigned DJ or an admin may accept; an admin can assign the DJ in
    the same call.
    """
    with transaction.atomic():
        booking = _get_booking_for_update(booking_id)

        if not _is_admin(actor):
            if dj_profile_id is not None:
                raise ForbiddenError("Only admins can assign a DJ")
            if not _owns_booking(actor, booking):
                raise ForbiddenError("You can only accept bookings assigned to you")

        if booking.status != Status.PENDING:
            raise ConflictError(f"Only pending bookings can be accepted, booking is {booking.status}")

        if dj_profile_id is not None:
            dj = DjProfile.objects.filter(pk=dj_profile_id).select_related("user").first()
            if dj is None:
                raise NotFoundError("DJ profile not found")
            booking.dj = dj
            booking.save(update_fields=["dj"])

        if booking.dj_id is None:
            raise ValidationError("Assign a DJ before accepting the booking")

        _apply_status(booking, Status.ACCEPTED, now=timezone.now(), actor=actor)
        create_in_app_notification(
            user=booking.client,
            notification_type=Notification.Type.BOOKING_ACCEPTED,
            title="Booking Accepted",
            message=(
                f"Your {_event_label(booking)} was accepted by {booking.dj.stage_name}. "
                "Please complete payment to confirm."
            ),
            data={"booking_id": booking.pk, "dj_id": booking.dj_id},
            action_url=f"/dashboard/bookings/{booking.pk}",
        )

    logger.info(f"Booking {booking.pk} accepted by user {getattr(actor, 'id', None)}")
    send_booking_accepted_email(booking)
    return booking


def decline_booking(booking_id, actor, reason: str) -> Booking:
    """
    Decline a booking: the assigned DJ or an admin moves it to CANCELLED.

    Client and DJ are notified with the reason, then rejection recovery
    prepares follow-up suggestions for the client.

    Raises:
        NotFoundError: booking does not exist
        ForbiddenError: caller is neither an admin nor the booking's DJ
        ConflictError: booking is no longer pending or accepted
    """
    reason = (reason or "").strip() or "No reason given"

    with transaction.atomic():
        booking = _get_booking_for_update(booking_id)

        if not (_is_admin(actor) or _owns_booking(actor, booking)):
            raise ForbiddenError("You can only decline bookings assigned to you")

        if booking.status not in (Status.PENDING, Status.ACCEPTED):
            raise ConflictError(f"Cannot decline a booking that is {booking.status}")

        _apply_status(booking, Status.CANCELLED, now=timezone.now(), reason=reason, actor=actor)

        create_in_app_notification(
            user=booking.client,
            notification_type=Notification.Type.BOOKING_DECLINED,
            title="Booking Declined",
            message=f"Your {_event_label(booking)} has been declined. Reason: {reason}",
            data={"booking_id": booking.pk, "reason": reason},
            action_url=_recovery_url(booking),
        )
        if booking.dj_id:
            create_in_app_notification(
                user=booking.dj.user,
                notification_type=Notification.Type.BOOKING_DECLINED,
                title="Booking Declined",
                message=f"The {_event_label(booking)} you were assigned to has been declined. Reason: {reason}",
                data={"booking_id": booking.pk, "reason": reason},
            )

    logger.info(f"Booking {booking.pk} declined by user {getattr(actor, 'id', None)}. Reason: {reason}")
    send_booking_cancelled_email(booking, reason)
    _run_rejection_recovery(booking.pk, reason)
    return booking


def mark_paid(booking_id, actor) -> Booking:
    """
    Record the payment of an accepted booking (ACCEPTED -> CONFIRMED).

    ``is_paid``, ``paid_at`` and the status are written in one update. The
    confirmation email is best effort.
    """
    if not _is_admin(actor):
        raise ForbiddenError("Admin access required")

    with transaction.atomic():
        booking = _get_booking_for_update(booking_id)

        if booking.status != Status.ACCEPTED:
            raise ConflictError(f"Only accepted bookings can be marked paid, booking is {booking.status}")

        _apply_status(booking, Status.CONFIRMED, now=timezone.now(), actor=actor)
        create_in_app_notification(
            user=booking.client,
            notification_type=Notification.Type.BOOKING_CONFIRMED,
            title="Booking Confirmed",
            message=f"Payment received. Your {_event_label(booking)} is now confirmed.",
            data={"booking_id": booking.pk},
            action_url=f"/dashboard/bookings/{booking.pk}",
        )

    logger.info(f"Booking {booking.pk} marked paid by admin {actor.id}")
    send_payment_received_email(booking)
    return booking


def expire_booking(booking_id, *, now: datetime | None = None) -> bool:
    """
    Cancel a pending booking whose response deadline has passed.

    Returns False, without touching anything, when the booking is gone,
    no longer pending or still within its deadline.
    """
    from .timeouts import is_booking_expired  # local import to avoid circular

    now = now or timezone.now()

    with transaction.atomic():
        try:
            booking = _get_booking_for_update(booking_id)
        except NotFoundError:
            logger.error(f"Booking {booking_id} not found for timeout handling")
            return False

        if booking.status != Status.PENDING:
            logger.info(f"Booking {booking_id} is no longer pending, skipping timeout")
            return False
        if not is_booking_expired(booking, now=now):
            return False

        _apply_status(booking, Status.CANCELLED, now=now, reason=TIMEOUT_REASON)

        dj_name = booking.dj.stage_name if booking.dj_id else "DJ"
        create_in_app_notification(
            user=booking.client,
            notification_type=Notification.Type.BOOKING_TIMEOUT,
            title="Booking Request Expired",
            message=(
                f"Your booking request with {dj_name} has expired because they didn't respond within "
                "the required time. We have some suggestions to help you find another DJ."
            ),
            data={
                "booking_id": booking.pk,
                "expired_dj_id": booking.dj_id,
                "event_date": booking.event_date.isoformat(),
                "event_type": booking.event_type,
            },
            action_url=_recovery_url(booking),
        )
        if booking.dj_id:
            create_in_app_notification(
                user=booking.dj.user,
                notification_type=Notification.Type.MISSED_BOOKING,
                title="Missed Booking Opportunity",
                message=(
                    f"You missed a booking opportunity for {_event_label(booking)}. Please respond to "
                    f"booking requests within {settings.BOOKING_PENDING_TIMEOUT_HOURS} hours to avoid "
                    "missing future opportunities."
                ),
                data={"booking_id": booking.pk, "event_type": booking.event_type},
            )

    logger.info(f"Booking {booking.pk} expired: {TIMEOUT_REASON}")
    _run_rejection_recovery(booking.pk, TIMEOUT_REASON)
    return True
