"""Serializers for the admin moderation API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import CustomUser
from apps.users.serializers import DjProfileSerializer


class PendingDjSerializer(serializers.ModelSerializer):
    """DJ applicant as seen by an admin."""

    dj_profile = DjProfileSerializer(read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            "id",
            "email",
            "username",
            "role",
            "status",
            "dj_profile",
            "created_at",
        ]
        read_only_fields = fields


class DjRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)
