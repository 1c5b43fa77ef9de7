"""Notification services for in-app records and emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_in_app_notification(
    user: "CustomUser",
    title: str,
    message: str,
    *,
    notification_type: str = Notification.Type.GENERAL,
    data: dict[str, Any] | None = None,
    action_url: str = "",
) -> Notification:
    """
    Create an in-app notification.

    Database errors propagate so that callers running inside
    ``transaction.atomic()`` roll back together with the change that
    triggered the notification.
    """
    notification = Notification.objects.create(
        user=user,
        type=notification_type,
        title=title,
        message=message,
        data=data or {},
        action_url=action_url,
    )
    logger.info(f"In-app notification created for {user.email}: {title}")
    return notification


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send an email, never raising.

    Args:
        recipient_email: recipient address
        subject: subject line
        template_name: Django template path (optional)
        context: template context
        html_message: ready HTML body (optional)

    Returns:
        bool: True when the message was handed to the email backend
    """
    if not recipient_email:
        return False

    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def send_booking_accepted_email(booking: "Booking") -> bool:
    """Asks the client to complete payment for an accepted booking."""
    client = booking.client
    pay_link = f"{settings.APP_URL}/dashboard/bookings/{booking.id}"

    html_message = f"""
    <html>
    <body>
        <p>Hey {client.display_name},</p>
        <p>Your {booking.event_type} on <b>{booking.event_date:%Y-%m-%d}</b> was accepted.</p>
        <p>Please complete payment to confirm:</p>
        <p><a href="{pay_link}">Pay now</a></p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=client.email,
        subject="Your booking request was accepted - complete payment",
        template_name=None,
        context={"booking": booking},
        html_message=html_message,
    )


def send_payment_received_email(booking: "Booking") -> bool:
    """Confirmation sent once an admin records the payment."""
    client = booking.client

    html_message = f"""
    <html>
    <body>
        <p>Hey {client.display_name},</p>
        <p>Your {booking.event_type} on <b>{booking.event_date:%Y-%m-%d}</b> is now confirmed.</p>
        <p>See you there! - The Pro-DJ team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=client.email,
        subject="Payment received - booking confirmed",
        template_name=None,
        context={"booking": booking},
        html_message=html_message,
    )


def send_booking_cancelled_email(booking: "Booking", reason: str) -> bool:
    """Lets the client know a request was cancelled and why."""
    client = booking.client
    recovery_link = f"{settings.APP_URL}/dashboard/client/recovery?bookingId={booking.id}"

    html_message = f"""
    <html>
    <body>
        <p>Hey {client.display_name},</p>
        <p>Your {booking.event_type} booking on <b>{booking.event_date:%Y-%m-%d}</b> was cancelled.</p>
        <p>Reason: {reason}</p>
        <p>We have prepared some options to help you find another DJ:
        <a href="{recovery_link}">see suggestions</a>.</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=client.email,
        subject="Your booking was cancelled",
        template_name=None,
        context={"booking": booking},
        html_message=html_message,
    )
