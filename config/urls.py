"""URL configuration for Pro-DJ project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

from apps.bookings.views import CronProcessTimeoutsView

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/djs/', include('apps.users.dj_urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/recoveries/', include('apps.bookings.recovery_urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
    # Admin moderation API
    path('api/v1/admin/', include('apps.users.api.urls')),
    # External scheduler entry point
    path('api/v1/cron/process-timeouts/', CronProcessTimeoutsView.as_view(), name='cron-process-timeouts'),
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
]
