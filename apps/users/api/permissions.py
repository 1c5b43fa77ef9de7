"""Permission classes shared by the admin and DJ facing APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def user_is_admin(user) -> bool:
    """Platform admins: role ADMIN, staff or superuser."""
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsPlatformAdmin(permissions.BasePermission):
    """Only platform admins may access."""

    message = "Admin access required"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return user_is_admin(request.user)
