"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import DjProfile

User = get_user_model()


class DjProfileSerializer(serializers.ModelSerializer):
    """Public DJ card."""

    user_id = serializers.ReadOnlyField(source="user.id")
    location = serializers.SerializerMethodField()

    class Meta:
        model = DjProfile
        fields = [
            "id",
            "user_id",
            "stage_name",
            "bio",
            "genres",
            "base_price_cents",
            "location",
            "is_accepting_bookings",
            "is_verified",
        ]
        read_only_fields = fields

    def get_location(self, obj: DjProfile) -> str:
        return obj.user.location or obj.location or "Location not set"


class UserSerializer(serializers.ModelSerializer):
    """Main user serializer."""

    dj_profile = DjProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "role",
            "status",
            "location",
            "dj_profile",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "status",
            "dj_profile",
            "created_at",
            "updated_at",
        ]
