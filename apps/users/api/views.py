"""API views for admin moderation of DJ applicants."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.notifications.models import Notification
from apps.notifications.services import create_in_app_notification
from apps.users.models import CustomUser, DjProfile
from shared.domain.exceptions import ValidationError

from .permissions import IsPlatformAdmin
from .serializers import DjRejectSerializer, PendingDjSerializer

logger = logging.getLogger(__name__)


class AdminDjViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for admins to review DJ applicants.

    Endpoints:
    - GET /api/v1/admin/djs/ - list DJ accounts (filter with ?status=PENDING)
    - GET /api/v1/admin/djs/{user_id}/ - applicant details
    - POST /api/v1/admin/djs/{user_id}/approve/ - approve a pending DJ
    - POST /api/v1/admin/djs/{user_id}/reject/ - reject a pending DJ
    """

    serializer_class = PendingDjSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    filterset_fields = ["status"]

    def get_queryset(self):  # type: ignore
        return CustomUser.objects.select_related("dj_profile").filter(role=CustomUser.RoleChoices.DJ)

    def _get_pending_dj(self) -> CustomUser:
        user = self.get_object()
        if user.status != CustomUser.StatusChoices.PENDING:
            raise ValidationError("DJ is not pending approval")
        return user

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        """
        Approve a DJ applicant.

        Activates the account and marks the profile verified and approved so
        the DJ starts appearing in the directory.
        """
        user = self._get_pending_dj()

        with transaction.atomic():
            user.status = CustomUser.StatusChoices.ACTIVE
            user.save(update_fields=["status", "updated_at"])
            DjProfile.objects.filter(user=user).update(is_verified=True, is_approved_by_admin=True)
            create_in_app_notification(
                user=user,
                notification_type=Notification.Type.DJ_APPROVED,
                title="DJ Profile Approved",
                message="Congratulations! Your DJ profile has been approved. You can now receive booking requests.",
            )

        logger.info(f"Admin {request.user.id} approved DJ {user.email}")
        user.refresh_from_db()
        return Response({"ok": True, "data": PendingDjSerializer(user).data}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        """
        Reject a DJ applicant.

        The account falls back to a regular client and the DJ profile is removed.
        """
        serializer = DjRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data["reason"]
        user = self._get_pending_dj()

        with transaction.atomic():
            user.status = CustomUser.StatusChoices.ACTIVE
            user.role = CustomUser.RoleChoices.CLIENT
            user.save(update_fields=["status", "role", "updated_at"])
            DjProfile.objects.filter(user=user).delete()
            create_in_app_notification(
                user=user,
                notification_type=Notification.Type.DJ_REJECTED,
                title="DJ Profile Rejected",
                message=(
                    f"Your DJ profile has been rejected. Reason: {reason}. "
                    "You can still use the platform as a client."
                ),
            )

        logger.info(f"Admin {request.user.id} rejected DJ {user.email}. Reason: {reason}")
        user.refresh_from_db()
        return Response({"ok": True, "data": PendingDjSerializer(user).data}, status=status.HTTP_200_OK)
