"""URL routing for the admin moderation API."""

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AdminDjViewSet

router = DefaultRouter()
router.register(r"djs", AdminDjViewSet, basename="admin-dj")

urlpatterns = [
    path("", include(router.urls)),
]
