"""URL declarations for the DJ directory."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DjProfileViewSet

router = DefaultRouter()
router.register(r'', DjProfileViewSet, basename='dj')

urlpatterns = [
    path('', include(router.urls)),
]
