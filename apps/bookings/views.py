"""API views for the booking domain."""

from __future__ import annotations

import hmac

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.api.permissions import IsPlatformAdmin, user_is_admin
from shared.domain.exceptions import ForbiddenError, UnauthorizedError

from . import services
from .models import Booking, BookingRecovery
from .recovery import accept_recovery_suggestion, decline_recovery_suggestion
from .serializers import (
    AcceptBookingSerializer,
    BookingCreateSerializer,
    BookingRecoverySerializer,
    BookingSerializer,
    DeclineBookingSerializer,
    RecoveryResponseSerializer,
    StatusChangeSerializer,
)
from .timeouts import get_expired_pending_bookings, process_expired_pending_bookings

cron_logger = structlog.get_logger(__name__)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings visible to the caller and their lifecycle actions.

    Admins see every booking, DJs the bookings assigned to them and clients
    their own requests. Lifecycle actions re-check authorization in the
    booking services.
    """

    queryset = Booking.objects.select_related("client", "dj", "dj__user").all()
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "is_paid", "dj"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user_is_admin(user):
            return qs
        return qs.filter(Q(client=user) | Q(dj__user=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def _booking_response(self, booking: Booking, message: str | None = None) -> Response:
        payload = {"ok": True, "data": BookingSerializer(booking, context=self.get_serializer_context()).data}
        if message:
            payload["message"] = message
        return Response(payload, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"])
    def accept(self, request, pk=None):  # type: ignore
        serializer = AcceptBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.accept_booking(pk, request.user, dj_profile_id=serializer.validated_data.get("dj_id"))
        return self._booking_response(booking, "Booking accepted")

    @action(detail=True, methods=["patch"])
    def decline(self, request, pk=None):  # type: ignore
        serializer = DeclineBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.decline_booking(pk, request.user, serializer.validated_data.get("reason", ""))
        return self._booking_response(booking, "Booking declined")

    @action(detail=True, methods=["patch"], url_path="mark-paid", permission_classes=[IsPlatformAdmin])
    def mark_paid(self, request, pk=None):  # type: ignore
        booking = services.mark_paid(pk, request.user)
        return self._booking_response(booking, "Booking marked as paid")

    @action(detail=True, methods=["patch"], url_path="status", permission_classes=[IsPlatformAdmin])
    def change_status(self, request, pk=None):  # type: ignore
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = services.transition_status(
            pk,
            data["status"],
            request.user,
            data["reason"],
            force=data["force"],
        )
        return self._booking_response(booking, f"Booking status updated to {booking.status}")

    @action(detail=True, methods=["get"])
    def recovery(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if not (user_is_admin(request.user) or booking.client_id == request.user.id):
            raise ForbiddenError("Only the booking's client can view recovery suggestions")

        recoveries = booking.recoveries.filter(status=BookingRecovery.Status.PENDING).select_related(
            "suggested_dj", "suggested_dj__user", "target_booking"
        )
        return Response({"ok": True, "data": BookingRecoverySerializer(recoveries, many=True).data})


class BookingTimeoutView(APIView):
    """Manual trigger and preview of the pending-booking timeout sweep (admins)."""

    permission_classes = [IsPlatformAdmin]

    def get(self, request):  # type: ignore
        expired = get_expired_pending_bookings()
        return Response(
            {
                "ok": True,
                "data": {
                    "expired_count": len(expired),
                    "expired_bookings": BookingSerializer(expired, many=True).data,
                },
            }
        )

    def post(self, request):  # type: ignore
        result = process_expired_pending_bookings()
        return Response(
            {
                "ok": True,
                "message": f"Processed {result.processed} expired bookings",
                "data": result.as_dict(),
            }
        )


class CronProcessTimeoutsView(APIView):
    """Entry point for an external scheduler, authenticated by a shared secret."""

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def _check_secret(self, request) -> None:
        expected = settings.CRON_SECRET_TOKEN
        header = request.headers.get("Authorization", "")
        supplied = header[len("Bearer "):] if header.startswith("Bearer ") else ""
        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            cron_logger.warning("cron.process_timeouts.unauthorized", remote_addr=request.META.get("REMOTE_ADDR"))
            raise UnauthorizedError("Unauthorized")

    def get(self, request):  # type: ignore
        return Response(
            {
                "ok": True,
                "message": "Timeout processing endpoint is healthy",
                "timestamp": timezone.now().isoformat(),
            }
        )

    def post(self, request):  # type: ignore
        self._check_secret(request)

        cron_logger.info("cron.process_timeouts.start")
        result = process_expired_pending_bookings()
        cron_logger.info(
            "cron.process_timeouts.done",
            processed=result.processed,
            failed=result.failed,
        )
        return Response(
            {
                "ok": True,
                "message": f"Processed {result.processed} expired bookings",
                "data": result.as_dict(),
                "timestamp": timezone.now().isoformat(),
            }
        )


class BookingRecoveryViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Recovery suggestions offered to the authenticated client."""

    serializer_class = BookingRecoverySerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "recovery_type", "original_booking"]

    def get_queryset(self):  # type: ignore
        qs = BookingRecovery.objects.select_related(
            "original_booking", "suggested_dj", "suggested_dj__user", "target_booking"
        )
        user = self.request.user
        if user_is_admin(user):
            return qs
        return qs.filter(original_booking__client=user)

    def _respond(self, recovery_id, handler) -> Response:
        self.get_object()
        serializer = RecoveryResponseSerializer(data=self.request.data)
        serializer.is_valid(raise_exception=True)
        recovery = handler(recovery_id, serializer.validated_data["response"])
        return Response({"ok": True, "data": BookingRecoverySerializer(recovery).data})

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):  # type: ignore
        return self._respond(pk, accept_recovery_suggestion)

    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):  # type: ignore
        return self._respond(pk, decline_recovery_suggestion)
