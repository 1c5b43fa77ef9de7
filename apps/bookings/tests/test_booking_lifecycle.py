"""Tests for the booking lifecycle services."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from apps.bookings import services
from apps.bookings.models import Booking, BookingRecovery
from apps.notifications.models import Notification
from apps.users.models import DjProfile, User
from shared.domain.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError


class BookingLifecycleTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.client_user = User.objects.create_user(email="client@example.com", password="ClientPass123")
        self.dj_user = User.objects.create_user(
            email="nova@example.com",
            password="DjPass12345",
            role=User.RoleChoices.DJ,
        )
        self.dj = DjProfile.objects.create(user=self.dj_user, stage_name="DJ Nova", is_approved_by_admin=True)
        self.booking = Booking.objects.create(
            client=self.client_user,
            dj=self.dj,
            event_type="Corporate",
            event_date=timezone.now() + timedelta(days=20),
        )

    def _refresh(self) -> Booking:
        self.booking.refresh_from_db()
        return self.booking

    def test_transition_table(self) -> None:
        S = Booking.Status
        self.assertTrue(services.can_transition(S.PENDING, S.ACCEPTED))
        self.assertTrue(services.can_transition(S.PENDING, S.DECLINED))
        self.assertTrue(services.can_transition(S.ACCEPTED, S.CONFIRMED))
        self.assertTrue(services.can_transition(S.ACCEPTED, S.CANCELLED))
        self.assertFalse(services.can_transition(S.PENDING, S.CONFIRMED))
        self.assertFalse(services.can_transition(S.ACCEPTED, S.PENDING))
        for terminal in (S.CONFIRMED, S.DECLINED, S.CANCELLED):
            for target in S.values:
                self.assertFalse(services.can_transition(terminal, target))

    def test_regular_transition_notifies_client_and_dj(self) -> None:
        services.transition_status(self.booking.pk, Booking.Status.ACCEPTED, self.admin, "Approved by ops")

        self.assertEqual(self._refresh().status, Booking.Status.ACCEPTED)
        recipients = set(
            Notification.objects.filter(type=Notification.Type.BOOKING_STATUS_CHANGED).values_list("user_id", flat=True)
        )
        self.assertEqual(recipients, {self.client_user.id, self.dj_user.id})

    def test_illegal_transition_leaves_booking_unchanged(self) -> None:
        with self.assertRaises(ConflictError):
            services.transition_status(self.booking.pk, Booking.Status.CONFIRMED, self.admin, "Skip ahead")

        booking = self._refresh()
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertFalse(booking.is_paid)
        self.assertFalse(Notification.objects.exists())

    def test_force_cannot_leave_terminal_state(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.Status.DECLINED)

        with self.assertRaises(ConflictError):
            services.transition_status(self.booking.pk, Booking.Status.PENDING, self.admin, "Reopen", force=True)

        self.assertEqual(self._refresh().status, Booking.Status.DECLINED)

    def test_forced_transition_is_logged_as_override(self) -> None:
        with self.assertLogs("apps.bookings.services", level="WARNING") as logs:
            services.transition_status(
                self.booking.pk, Booking.Status.CONFIRMED, self.admin, "Paid offline", force=True
            )

        self.assertTrue(any("Admin override" in line for line in logs.output))
        booking = self._refresh()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertTrue(booking.is_paid)
        self.assertFalse(BookingRecovery.objects.exists())

    def test_transition_validates_input(self) -> None:
        with self.assertRaises(ValidationError):
            services.transition_status(self.booking.pk, "ARCHIVED", self.admin, "Cleanup")
        with self.assertRaises(ValidationError):
            services.transition_status(self.booking.pk, Booking.Status.ACCEPTED, self.admin, "   ")
        with self.assertRaises(NotFoundError):
            services.transition_status(999999, Booking.Status.ACCEPTED, self.admin, "Missing")

    def test_status_write_rolls_back_when_notification_fails(self) -> None:
        with mock.patch(
            "apps.bookings.services.create_in_app_notification",
            side_effect=RuntimeError("db down"),
        ):
            with self.assertRaises(RuntimeError):
                services.decline_booking(self.booking.pk, self.admin, "DJ unavailable")

        self.assertEqual(self._refresh().status, Booking.Status.PENDING)

    def test_recovery_failure_does_not_undo_decline(self) -> None:
        with mock.patch(
            "apps.bookings.recovery.handle_booking_rejection",
            side_effect=RuntimeError("recovery exploded"),
        ):
            booking = services.decline_booking(self.booking.pk, self.admin, "DJ unavailable")

        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(self._refresh().status, Booking.Status.CANCELLED)
        self.assertFalse(BookingRecovery.objects.exists())

    def test_decline_runs_recovery(self) -> None:
        services.decline_booking(self.booking.pk, self.dj_user, "Double booked")

        self.assertTrue(BookingRecovery.objects.filter(original_booking=self.booking).exists())
        self.assertTrue(
            Notification.objects.filter(user=self.client_user, type=Notification.Type.BOOKING_REJECTED).exists()
        )

    def test_decline_by_unrelated_dj_is_forbidden(self) -> None:
        stranger = User.objects.create_user(email="x@example.com", password="pw12345678", role=User.RoleChoices.DJ)
        DjProfile.objects.create(user=stranger, stage_name="Stranger")

        with self.assertRaises(ForbiddenError):
            services.decline_booking(self.booking.pk, stranger, "Nope")

        self.assertEqual(self._refresh().status, Booking.Status.PENDING)
        self.assertFalse(Notification.objects.exists())

    def test_email_failure_does_not_undo_payment(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.Status.ACCEPTED)

        with mock.patch("apps.notifications.services.send_mail", side_effect=OSError("smtp down")):
            services.mark_paid(self.booking.pk, self.admin)

        booking = self._refresh()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertTrue(booking.is_paid)
        self.assertIsNotNone(booking.paid_at)

    def test_mark_paid_twice_conflicts(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.Status.ACCEPTED)
        services.mark_paid(self.booking.pk, self.admin)

        with self.assertRaises(ConflictError):
            services.mark_paid(self.booking.pk, self.admin)

    def test_mark_paid_requires_admin(self) -> None:
        with self.assertRaises(ForbiddenError):
            services.mark_paid(self.booking.pk, self.client_user)
