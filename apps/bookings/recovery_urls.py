"""URL routing for booking recovery suggestions."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingRecoveryViewSet

router = DefaultRouter()
router.register(r"", BookingRecoveryViewSet, basename="recovery")

urlpatterns = [
    path("", include(router.urls)),
]
