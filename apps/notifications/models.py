"""Notification model.

Defines the in-app notification delivered to users through the web
dashboard. Notifications are created by domain services as a side effect of
booking status changes and DJ moderation, and consumed by recipients. Each
notification can be marked as read.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_STATUS_CHANGED = "BOOKING_STATUS_CHANGED", _("Booking status changed")
        BOOKING_ACCEPTED = "BOOKING_ACCEPTED", _("Booking accepted")
        BOOKING_DECLINED = "BOOKING_DECLINED", _("Booking declined")
        BOOKING_CONFIRMED = "BOOKING_CONFIRMED", _("Booking confirmed")
        BOOKING_TIMEOUT = "BOOKING_TIMEOUT", _("Booking request expired")
        MISSED_BOOKING = "MISSED_BOOKING", _("Missed booking")
        BOOKING_REJECTED = "BOOKING_REJECTED", _("Booking rejected")
        REFUND_PROCESSED = "REFUND_PROCESSED", _("Refund processed")
        DJ_APPROVED = "DJ_APPROVED", _("DJ approved")
        DJ_REJECTED = "DJ_REJECTED", _("DJ rejected")
        GENERAL = "GENERAL", _("General")

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    type = models.CharField(max_length=40, choices=Type.choices, default=Type.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    action_url = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_user_read_idx')]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
