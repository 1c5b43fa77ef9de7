"""API tests for DJ moderation and the public DJ directory."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.notifications.models import Notification
from apps.users.models import DjProfile, User


class DjModerationAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.applicant = User.objects.create_user(
            email="applicant@example.com",
            password="DjPass12345",
            role=User.RoleChoices.DJ,
            status=User.StatusChoices.PENDING,
        )
        DjProfile.objects.create(user=self.applicant, stage_name="DJ Rookie", base_price_cents=30000)

    def test_admin_approves_pending_dj(self) -> None:
        self.client.force_authenticate(self.admin)

        resp = self.client.post(reverse("admin-dj-approve", args=[self.applicant.id]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.applicant.refresh_from_db()
        self.assertEqual(self.applicant.status, User.StatusChoices.ACTIVE)
        profile = self.applicant.dj_profile
        self.assertTrue(profile.is_verified)
        self.assertTrue(profile.is_approved_by_admin)
        self.assertTrue(profile.is_bookable)
        self.assertTrue(
            Notification.objects.filter(user=self.applicant, type=Notification.Type.DJ_APPROVED).exists()
        )

    def test_admin_rejects_pending_dj_with_reason(self) -> None:
        self.client.force_authenticate(self.admin)

        resp = self.client.post(
            reverse("admin-dj-reject", args=[self.applicant.id]),
            {"reason": "Incomplete portfolio"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertIsNone(resp.data["data"]["dj_profile"])
        self.applicant.refresh_from_db()
        self.assertEqual(self.applicant.role, User.RoleChoices.CLIENT)
        self.assertEqual(self.applicant.status, User.StatusChoices.ACTIVE)
        self.assertFalse(DjProfile.objects.filter(user=self.applicant).exists())
        note = Notification.objects.get(user=self.applicant, type=Notification.Type.DJ_REJECTED)
        self.assertIn("Incomplete portfolio", note.message)

    def test_reject_requires_reason(self) -> None:
        self.client.force_authenticate(self.admin)

        resp = self.client.post(reverse("admin-dj-reject", args=[self.applicant.id]), {}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.data)

    def test_approving_active_dj_is_rejected(self) -> None:
        self.applicant.status = User.StatusChoices.ACTIVE
        self.applicant.save(update_fields=["status"])
        self.client.force_authenticate(self.admin)

        resp = self.client.post(reverse("admin-dj-approve", args=[self.applicant.id]))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.data)
        self.assertEqual(resp.data["error"], "DJ is not pending approval")

    def test_moderating_a_client_returns_404(self) -> None:
        client_user = User.objects.create_user(email="client@example.com", password="ClientPass123")
        self.client.force_authenticate(self.admin)

        resp = self.client.post(reverse("admin-dj-approve", args=[client_user.id]))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND, resp.data)

    def test_moderation_is_admin_only(self) -> None:
        self.client.force_authenticate(self.applicant)

        resp = self.client.post(reverse("admin-dj-approve", args=[self.applicant.id]))

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN, resp.data)


class DjDirectoryAPITests(APITestCase):
    def setUp(self) -> None:
        self.client_user = User.objects.create_user(email="client@example.com", password="ClientPass123")
        self.free = self._make_dj("free@example.com", "DJ Free")
        self.busy = self._make_dj("busy@example.com", "DJ Busy")
        self.hidden = self._make_dj("hidden@example.com", "DJ Hidden", is_accepting_bookings=False)

        self.start = timezone.now() + timedelta(days=14)
        self.end = self.start + timedelta(hours=4)
        Booking.objects.create(
            client=self.client_user,
            dj=self.busy,
            event_type="Club",
            event_date=self.start,
            start_time=self.start - timedelta(hours=1),
            end_time=self.start + timedelta(hours=1),
            status=Booking.Status.ACCEPTED,
        )

    def _make_dj(self, email: str, stage_name: str, **profile) -> DjProfile:
        user = User.objects.create_user(email=email, password="DjPass12345", role=User.RoleChoices.DJ)
        return DjProfile.objects.create(user=user, stage_name=stage_name, is_approved_by_admin=True, **profile)

    def test_directory_lists_bookable_djs(self) -> None:
        resp = self.client.get(reverse("dj-list"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        names = {item["stage_name"] for item in resp.data}
        self.assertEqual(names, {"DJ Free", "DJ Busy"})

    def test_available_excludes_overlapping_bookings(self) -> None:
        resp = self.client.get(
            reverse("dj-available"),
            {"start": self.start.isoformat(), "end": self.end.isoformat()},
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual([item["id"] for item in resp.data["data"]], [self.free.id])

    def test_available_requires_valid_range(self) -> None:
        resp = self.client.get(
            reverse("dj-available"),
            {"start": self.end.isoformat(), "end": self.start.isoformat()},
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.data)

    def test_available_rejects_impossible_dates(self) -> None:
        resp = self.client.get(
            reverse("dj-available"),
            {"start": "2026-02-30T10:00:00", "end": "2026-02-30T12:00:00"},
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.data)
        self.assertEqual(resp.data, {"ok": False, "error": "start and end must be ISO 8601 datetimes"})
