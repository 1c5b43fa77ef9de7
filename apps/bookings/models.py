"""Booking domain models for Pro-DJ."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """A client's request for a DJ's services at an event.

    Status moves PENDING -> ACCEPTED -> CONFIRMED on the happy path;
    CONFIRMED, DECLINED and CANCELLED are terminal. Bookings are never
    deleted.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        ACCEPTED = "ACCEPTED", _("Accepted")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        DECLINED = "DECLINED", _("Declined")
        CANCELLED = "CANCELLED", _("Cancelled")

    class CancelledBy(models.TextChoices):
        CLIENT = "CLIENT", _("Client")
        DJ = "DJ", _("DJ")
        ADMIN = "ADMIN", _("Admin")
        SYSTEM = "SYSTEM", _("System")

    TERMINAL_STATUSES = (Status.CONFIRMED, Status.DECLINED, Status.CANCELLED)
    ACTIVE_STATUSES = (Status.PENDING, Status.ACCEPTED, Status.CONFIRMED)

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    dj = models.ForeignKey(
        "users.DjProfile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
        help_text=_("Unassigned until the booking is accepted."),
    )
    event_type = models.CharField(max_length=100)
    event_date = models.DateTimeField()
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    package_key = models.CharField(max_length=50, blank=True)
    quoted_price_cents = models.PositiveIntegerField(null=True, blank=True)
    message = models.TextField(blank=True)
    details = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("Free-form event details, e.g. preferred_genres."),
    )
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    checkout_session_id = models.CharField(max_length=255, null=True, blank=True)
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(
        max_length=20,
        choices=CancelledBy.choices,
        blank=True,
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(is_paid=False) | models.Q(status="CONFIRMED"),
                name="booking_paid_only_when_confirmed",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="booking_status_created_idx"),
            models.Index(fields=["client", "event_date"], name="booking_client_event_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} {self.event_type} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


class BookingRecovery(models.Model):
    """Follow-up suggestion offered to a client after a decline or expiry."""

    class RecoveryType(models.TextChoices):
        EXTEND_DJ = "EXTEND_DJ", _("Extend a confirmed DJ")
        NEW_DJ = "NEW_DJ", _("Book a replacement DJ")
        REFUND = "REFUND", _("Refund")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        ACCEPTED = "ACCEPTED", _("Accepted")
        DECLINED = "DECLINED", _("Declined")

    original_booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="recoveries",
    )
    recovery_type = models.CharField(max_length=20, choices=RecoveryType.choices)
    suggested_dj = models.ForeignKey(
        "users.DjProfile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recovery_suggestions",
    )
    target_booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Confirmed booking to extend for EXTEND_DJ suggestions."),
    )
    message = models.TextField()
    action_url = models.CharField(max_length=500, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    client_response = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking recovery")
        verbose_name_plural = _("Booking recoveries")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.recovery_type} for booking #{self.original_booking_id}"
