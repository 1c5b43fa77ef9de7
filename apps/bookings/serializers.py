"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import DjProfile
from apps.users.serializers import DjProfileSerializer

from .availability import is_dj_available
from .models import Booking, BookingRecovery
from .timeouts import get_booking_timeout_info


class BookingCreateSerializer(serializers.ModelSerializer):
    """Booking request created by a client."""

    dj = serializers.PrimaryKeyRelatedField(
        queryset=DjProfile.objects.select_related("user"),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Booking
        fields = [
            "dj",
            "event_type",
            "event_date",
            "start_time",
            "end_time",
            "package_key",
            "quoted_price_cents",
            "message",
            "details",
        ]
        extra_kwargs = {
            "message": {"required": False, "allow_blank": True},
            "package_key": {"required": False, "allow_blank": True},
        }

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_time")
        end = attrs.get("end_time")
        if (start is None) != (end is None):
            raise serializers.ValidationError("start_time and end_time must be given together.")
        if start and end and end <= start:
            raise serializers.ValidationError("end_time must be after start_time.")

        dj = attrs.get("dj")
        if dj is not None:
            if not dj.is_bookable:
                raise serializers.ValidationError({"dj": ["This DJ is not accepting bookings."]})
            if start and end and not is_dj_available(dj, start, end):
                raise serializers.ValidationError({"dj": ["This DJ is already booked for the selected time."]})
        return attrs

    def create(self, validated_data):  # type: ignore
        return Booking.objects.create(client=self.context["request"].user, **validated_data)


class BookingSerializer(serializers.ModelSerializer):
    """Booking representation with the pending response deadline."""

    client_id = serializers.ReadOnlyField(source="client.id")
    client_email = serializers.ReadOnlyField(source="client.email")
    dj_id = serializers.ReadOnlyField(source="dj.id")
    dj_stage_name = serializers.ReadOnlyField(source="dj.stage_name")
    timeout_info = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "client_id",
            "client_email",
            "dj_id",
            "dj_stage_name",
            "event_type",
            "event_date",
            "start_time",
            "end_time",
            "status",
            "package_key",
            "quoted_price_cents",
            "message",
            "details",
            "is_paid",
            "paid_at",
            "cancellation_reason",
            "cancelled_at",
            "cancelled_by",
            "timeout_info",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_timeout_info(self, obj: Booking):
        if obj.status != Booking.Status.PENDING:
            return None
        info = get_booking_timeout_info(obj)
        info["deadline"] = info["deadline"].isoformat()
        return info


class AcceptBookingSerializer(serializers.Serializer):
    dj_id = serializers.IntegerField(required=False, min_value=1)


class DeclineBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class StatusChangeSerializer(serializers.Serializer):
    """Admin status change; ``force`` bypasses the transition table."""

    status = serializers.ChoiceField(choices=Booking.Status.choices)
    reason = serializers.CharField(max_length=500)
    force = serializers.BooleanField(required=False, default=False)


class BookingRecoverySerializer(serializers.ModelSerializer):
    original_booking_id = serializers.ReadOnlyField(source="original_booking.id")
    target_booking_id = serializers.ReadOnlyField(source="target_booking.id")
    suggested_dj = DjProfileSerializer(read_only=True)

    class Meta:
        model = BookingRecovery
        fields = [
            "id",
            "original_booking_id",
            "recovery_type",
            "suggested_dj",
            "target_booking_id",
            "message",
            "action_url",
            "status",
            "client_response",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecoveryResponseSerializer(serializers.Serializer):
    response = serializers.CharField(required=False, allow_blank=True, default="")
