"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingRecovery


class BookingRecoveryInline(admin.TabularInline):
    model = BookingRecovery
    fk_name = "original_booking"
    extra = 0
    fields = ("recovery_type", "suggested_dj", "status", "client_response", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "event_type",
        "client",
        "dj",
        "status",
        "is_paid",
        "event_date",
        "created_at",
    )
    list_filter = ("status", "is_paid", "cancelled_by", "event_date")
    search_fields = ("event_type", "client__email", "dj__stage_name")
    raw_id_fields = ("client", "dj")
    readonly_fields = (
        "created_at",
        "updated_at",
        "paid_at",
        "cancelled_at",
        "cancelled_by",
    )
    inlines = [BookingRecoveryInline]


@admin.register(BookingRecovery)
class BookingRecoveryAdmin(admin.ModelAdmin):
    list_display = ("original_booking", "recovery_type", "suggested_dj", "status", "created_at")
    list_filter = ("recovery_type", "status")
    raw_id_fields = ("original_booking", "suggested_dj", "target_booking")
