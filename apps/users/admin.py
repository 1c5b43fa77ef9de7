"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import CustomUser, DjProfile


class DjProfileInline(admin.StackedInline):
    model = DjProfile
    can_delete = False
    extra = 0


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("username", "first_name", "last_name", "location")}),
        (_("Marketplace"), {"fields": ("role", "status")}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "first_name",
                    "last_name",
                    "role",
                    "is_staff",
                    "is_superuser",
                ),
            },
        ),
    )
    list_display = ("email", "role", "status", "is_active", "is_staff", "created_at")
    list_filter = ("role", "status", "is_active", "is_staff")
    search_fields = ("email", "username", "first_name", "last_name")
    ordering = ("email",)
    readonly_fields = ("created_at", "updated_at", "date_joined")
    inlines = [DjProfileInline]


@admin.register(DjProfile)
class DjProfileAdmin(admin.ModelAdmin):
    list_display = (
        "stage_name",
        "user",
        "base_price_cents",
        "is_accepting_bookings",
        "is_approved_by_admin",
        "is_verified",
    )
    list_filter = ("is_accepting_bookings", "is_approved_by_admin", "is_verified")
    search_fields = ("stage_name", "user__email")
    readonly_fields = ("created_at", "updated_at")
