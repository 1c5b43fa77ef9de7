"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import DjProfile

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    """Client or DJ sign-up.

    DJs additionally provide a stage name; their account stays ``PENDING``
    until an admin approves the profile.
    """

    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    password_confirm = serializers.CharField(min_length=8, write_only=True)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(
        choices=[User.RoleChoices.CLIENT, User.RoleChoices.DJ],
        default=User.RoleChoices.CLIENT,
    )
    stage_name = serializers.CharField(required=False, allow_blank=True)
    genres = serializers.ListField(child=serializers.CharField(), required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("password") != attrs.get("password_confirm"):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        if User.objects.filter(email__iexact=attrs.get("email")).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})
        if attrs.get("role") == User.RoleChoices.DJ and not attrs.get("stage_name"):
            raise serializers.ValidationError({"stage_name": "Stage name is required for DJs."})
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        stage_name = validated_data.pop("stage_name", "")
        genres = validated_data.pop("genres", [])

        if validated_data.get("role") == User.RoleChoices.DJ:
            validated_data["status"] = User.StatusChoices.PENDING

        user = User.objects.create_user(password=password, **validated_data)
        if user.is_dj():
            DjProfile.objects.create(user=user, stage_name=stage_name, genres=genres)
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            user = User.objects.get(email__iexact=attrs.get("email", ""))
        except User.DoesNotExist:
            raise serializers.ValidationError({"non_field_errors": ["Invalid email or password."]})

        if not user.check_password(attrs.get("password", "")):
            raise serializers.ValidationError({"non_field_errors": ["Invalid email or password."]})

        if not user.is_active or user.status == User.StatusChoices.SUSPENDED:
            raise serializers.ValidationError({"non_field_errors": ["This account is suspended."]})

        attrs["user"] = user
        return attrs
