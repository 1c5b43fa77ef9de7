"""User and DJ directory API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.utils.dateparse import parse_datetime  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.availability import get_available_djs
from shared.domain.exceptions import ValidationError

from .models import DjProfile
from .serializers import DjProfileSerializer, UserSerializer

User = get_user_model()


class UserViewSet(viewsets.GenericViewSet):
    """Account endpoints for the authenticated user.

    - `me` returns or updates the current user's profile
    """

    serializer_class = UserSerializer
    queryset = User.objects.select_related("dj_profile").all()
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["get", "patch"])
    def me(self, request):
        """Returns the current user's profile; PATCH updates editable fields."""
        if request.method == "PATCH":
            serializer = UserSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(UserSerializer(request.user).data)


class DjProfileViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Directory of bookable DJs.

    - GET /api/v1/djs/ - approved, active DJs accepting bookings
    - GET /api/v1/djs/available/?start=...&end=... - DJs free for a time slot
    """

    serializer_class = DjProfileSerializer
    permission_classes = [permissions.AllowAny]
    filterset_fields = ["is_verified"]

    def get_queryset(self):  # type: ignore
        return DjProfile.bookable()

    @action(detail=False, methods=["get"])
    def available(self, request):
        try:
            start = parse_datetime(request.query_params.get("start", ""))
            end = parse_datetime(request.query_params.get("end", ""))
        except ValueError:
            start = end = None
        if start is None or end is None:
            raise ValidationError("start and end must be ISO 8601 datetimes")
        if end <= start:
            raise ValidationError("end must be after start")

        djs = get_available_djs(start, end)
        return Response({"ok": True, "data": DjProfileSerializer(djs, many=True).data})
