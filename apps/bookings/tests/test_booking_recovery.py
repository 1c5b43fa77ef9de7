"""Tests for rejection recovery suggestions and the client responses to them."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, BookingRecovery
from apps.bookings.recovery import (
    accept_recovery_suggestion,
    decline_recovery_suggestion,
    handle_booking_rejection,
)
from apps.notifications.models import Notification
from apps.users.models import DjProfile, User
from shared.domain.exceptions import ConflictError


def make_dj(email: str, stage_name: str, *, genres=None, price=50000) -> DjProfile:
    user = User.objects.create_user(email=email, password="DjPass12345", role=User.RoleChoices.DJ)
    return DjProfile.objects.create(
        user=user,
        stage_name=stage_name,
        genres=genres or [],
        base_price_cents=price,
        is_approved_by_admin=True,
        is_verified=True,
    )


class RecoveryFixtureMixin:
    def setUp(self) -> None:
        self.client_user = User.objects.create_user(email="client@example.com", password="ClientPass123")
        self.original_dj = make_dj("nova@example.com", "DJ Nova", genres=["house"])

        day = (timezone.now() + timedelta(days=10)).replace(hour=0, minute=0, second=0, microsecond=0)
        self.start = day + timedelta(hours=18)
        self.end = day + timedelta(hours=22)
        self.rejected = Booking.objects.create(
            client=self.client_user,
            dj=self.original_dj,
            event_type="Wedding",
            event_date=self.start,
            start_time=self.start,
            end_time=self.end,
            quoted_price_cents=120000,
            message="Ceremony and reception",
            details={"preferred_genres": ["house", "techno"]},
            status=Booking.Status.CANCELLED,
        )


class RecoverySuggestionTests(RecoveryFixtureMixin, TestCase):
    def test_refund_when_no_dj_is_available(self) -> None:
        recoveries = handle_booking_rejection(self.rejected.pk, "DJ unavailable")

        self.assertEqual([r.recovery_type for r in recoveries], [BookingRecovery.RecoveryType.REFUND])
        notification = Notification.objects.get(user=self.client_user, type=Notification.Type.BOOKING_REJECTED)
        self.assertEqual(notification.data["reason"], "DJ unavailable")
        self.assertEqual(notification.data["suggestions"][0]["type"], "REFUND")

    def test_new_dj_is_best_genre_match(self) -> None:
        make_dj("echo@example.com", "DJ Echo", genres=["rock"])
        vibe = make_dj("vibe@example.com", "DJ Vibe", genres=["techno", "house"])
        make_dj("cheap@example.com", "DJ NoPrice", genres=["house", "techno"], price=None)

        recoveries = handle_booking_rejection(self.rejected.pk, "DJ unavailable")

        self.assertEqual(len(recoveries), 1)
        suggestion = recoveries[0]
        self.assertEqual(suggestion.recovery_type, BookingRecovery.RecoveryType.NEW_DJ)
        self.assertEqual(suggestion.suggested_dj_id, vibe.pk)
        self.assertIn("Specializes in techno, house", suggestion.message)

    def test_busy_dj_is_not_suggested(self) -> None:
        echo = make_dj("echo@example.com", "DJ Echo", genres=["rock"])
        vibe = make_dj("vibe@example.com", "DJ Vibe", genres=["house"])
        other_client = User.objects.create_user(email="other@example.com", password="OtherPass123")
        Booking.objects.create(
            client=other_client,
            dj=vibe,
            event_type="Club",
            event_date=self.start,
            start_time=self.start + timedelta(hours=1),
            end_time=self.end + timedelta(hours=1),
            status=Booking.Status.CONFIRMED,
            is_paid=True,
        )

        recoveries = handle_booking_rejection(self.rejected.pk, "DJ unavailable")

        self.assertEqual([r.suggested_dj_id for r in recoveries], [echo.pk])

    def test_confirmed_sibling_gets_extend_suggestion(self) -> None:
        sibling_dj = make_dj("echo@example.com", "DJ Echo", genres=["house"])
        sibling = Booking.objects.create(
            client=self.client_user,
            dj=sibling_dj,
            event_type="Wedding",
            event_date=self.start - timedelta(hours=4),
            start_time=self.start - timedelta(hours=4),
            end_time=self.start,
            status=Booking.Status.CONFIRMED,
            is_paid=True,
        )
        vibe = make_dj("vibe@example.com", "DJ Vibe", genres=["techno"])

        recoveries = handle_booking_rejection(self.rejected.pk, "DJ unavailable")

        by_type = {r.recovery_type: r for r in recoveries}
        self.assertEqual(set(by_type), {BookingRecovery.RecoveryType.EXTEND_DJ, BookingRecovery.RecoveryType.NEW_DJ})
        self.assertEqual(by_type[BookingRecovery.RecoveryType.EXTEND_DJ].target_booking_id, sibling.pk)
        self.assertEqual(by_type[BookingRecovery.RecoveryType.NEW_DJ].suggested_dj_id, vibe.pk)

    def test_booking_without_slot_falls_back_to_refund(self) -> None:
        make_dj("vibe@example.com", "DJ Vibe", genres=["house"])
        Booking.objects.filter(pk=self.rejected.pk).update(start_time=None, end_time=None)

        recoveries = handle_booking_rejection(self.rejected.pk, "Expired")

        self.assertEqual([r.recovery_type for r in recoveries], [BookingRecovery.RecoveryType.REFUND])

    def test_missing_booking_yields_nothing(self) -> None:
        self.assertEqual(handle_booking_rejection(999999, "Expired"), [])
        self.assertFalse(Notification.objects.exists())


class RecoveryResponseTests(RecoveryFixtureMixin, TestCase):
    def test_accepting_new_dj_creates_pending_booking(self) -> None:
        vibe = make_dj("vibe@example.com", "DJ Vibe", genres=["house"])
        recovery = handle_booking_rejection(self.rejected.pk, "DJ unavailable")[0]

        accept_recovery_suggestion(recovery.pk, "Sounds great")

        new_booking = Booking.objects.get(dj=vibe)
        self.assertEqual(new_booking.status, Booking.Status.PENDING)
        self.assertEqual(new_booking.client_id, self.client_user.id)
        self.assertEqual(new_booking.start_time, self.start)
        self.assertEqual(new_booking.details, self.rejected.details)
        recovery.refresh_from_db()
        self.assertEqual(recovery.status, BookingRecovery.Status.ACCEPTED)
        self.assertEqual(recovery.client_response, "Sounds great")

    def test_accepting_extend_moves_end_time(self) -> None:
        sibling = Booking.objects.create(
            client=self.client_user,
            dj=make_dj("echo@example.com", "DJ Echo"),
            event_type="Wedding",
            event_date=self.start - timedelta(hours=4),
            start_time=self.start - timedelta(hours=4),
            end_time=self.start,
            status=Booking.Status.CONFIRMED,
            is_paid=True,
        )
        recovery = BookingRecovery.objects.get(
            pk__in=[r.pk for r in handle_booking_rejection(self.rejected.pk, "DJ unavailable")],
            recovery_type=BookingRecovery.RecoveryType.EXTEND_DJ,
        )

        accept_recovery_suggestion(recovery.pk)

        sibling.refresh_from_db()
        self.assertEqual(sibling.end_time, self.end)

    def test_accepting_refund_notifies_client(self) -> None:
        recovery = handle_booking_rejection(self.rejected.pk, "DJ unavailable")[0]

        accept_recovery_suggestion(recovery.pk)

        note = Notification.objects.get(type=Notification.Type.REFUND_PROCESSED)
        self.assertEqual(note.user_id, self.client_user.id)
        self.assertEqual(note.data["amount"], 120000)

    def test_suggestion_can_only_be_answered_once(self) -> None:
        recovery = handle_booking_rejection(self.rejected.pk, "DJ unavailable")[0]
        decline_recovery_suggestion(recovery.pk, "No thanks")

        recovery.refresh_from_db()
        self.assertEqual(recovery.status, BookingRecovery.Status.DECLINED)
        with self.assertRaises(ConflictError):
            accept_recovery_suggestion(recovery.pk)


class RecoveryAPITests(RecoveryFixtureMixin, APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.recovery = handle_booking_rejection(self.rejected.pk, "DJ unavailable")[0]
        self.stranger = User.objects.create_user(email="stranger@example.com", password="StrangerPass1")

    def test_client_lists_own_suggestions(self) -> None:
        self.client.force_authenticate(self.client_user)

        resp = self.client.get(reverse("recovery-list"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual([item["id"] for item in resp.data], [self.recovery.pk])

    def test_booking_recovery_endpoint(self) -> None:
        self.client.force_authenticate(self.client_user)

        resp = self.client.get(reverse("booking-recovery", args=[self.rejected.pk]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["data"][0]["recovery_type"], BookingRecovery.RecoveryType.REFUND)

    def test_client_accepts_suggestion(self) -> None:
        self.client.force_authenticate(self.client_user)

        resp = self.client.post(
            reverse("recovery-accept", args=[self.recovery.pk]),
            {"response": "Please refund"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["data"]["status"], BookingRecovery.Status.ACCEPTED)

    def test_other_client_cannot_see_or_answer(self) -> None:
        self.client.force_authenticate(self.stranger)

        resp = self.client.get(reverse("recovery-list"))
        self.assertEqual(resp.data, [])

        resp = self.client.post(reverse("recovery-decline", args=[self.recovery.pk]), {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND, resp.data)
        self.recovery.refresh_from_db()
        self.assertEqual(self.recovery.status, BookingRecovery.Status.PENDING)
