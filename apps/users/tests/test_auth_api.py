"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import DjProfile, User


class AuthAPITests(APITestCase):
    def test_register_client_returns_tokens(self) -> None:
        payload = {
            "email": "client@example.com",
            "first_name": "Casey",
            "last_name": "Client",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("tokens", response.data)
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.CLIENT)
        self.assertEqual(response.data["user"]["status"], User.StatusChoices.ACTIVE)

    def test_register_dj_waits_for_approval(self) -> None:
        payload = {
            "email": "nova@example.com",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
            "role": User.RoleChoices.DJ,
            "stage_name": "DJ Nova",
            "genres": ["house"],
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        user = User.objects.get(email=payload["email"])
        self.assertEqual(user.status, User.StatusChoices.PENDING)
        profile = DjProfile.objects.get(user=user)
        self.assertEqual(profile.stage_name, "DJ Nova")
        self.assertFalse(profile.is_approved_by_admin)
        self.assertFalse(profile.is_bookable)

    def test_register_dj_requires_stage_name(self) -> None:
        payload = {
            "email": "nameless@example.com",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
            "role": User.RoleChoices.DJ,
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertFalse(response.data["ok"])

    def test_register_rejects_password_mismatch(self) -> None:
        payload = {
            "email": "typo@example.com",
            "password": "StrongPass123",
            "password_confirm": "StrongPass124",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_login_and_suspended_account(self) -> None:
        user = User.objects.create_user(email="login@example.com", password="CorrectPassword1")
        url = reverse("auth:login")

        response = self.client.post(url, {"email": user.email, "password": "wrong"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"email": user.email, "password": "CorrectPassword1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])

        user.status = User.StatusChoices.SUSPENDED
        user.save(update_fields=["status"])
        response = self.client.post(url, {"email": user.email, "password": "CorrectPassword1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_jwt_token_obtain_and_me(self) -> None:
        User.objects.create_user(email="jwt@example.com", password="CorrectPassword1", username="Jay")

        response = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "jwt@example.com", "password": "CorrectPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = self.client.get(reverse("user-me"))
        self.assertEqual(me.status_code, status.HTTP_200_OK, me.data)
        self.assertEqual(me.data["email"], "jwt@example.com")
