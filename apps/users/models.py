"""User domain models for Pro-DJ.

The platform differentiates three roles (client, DJ, admin). A DJ applicant
keeps the ``PENDING`` account status until an admin approves the profile;
only approved, active DJs who accept bookings are offered to clients.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CustomUserManager(BaseUserManager):
    """User manager using email as the login."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.CLIENT)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Platform user with a marketplace role and account status."""

    class RoleChoices(models.TextChoices):
        CLIENT = "CLIENT", _("Client")
        DJ = "DJ", _("DJ")
        ADMIN = "ADMIN", _("Admin")

    class StatusChoices(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        PENDING = "PENDING", _("Pending approval")
        SUSPENDED = "SUSPENDED", _("Suspended")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        help_text=_("Optional, shown in notifications and emails."),
    )
    email = models.EmailField(_("Email"), unique=True)
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.CLIENT,
    )
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=StatusChoices.choices,
        default=StatusChoices.ACTIVE,
    )
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    @property
    def display_name(self) -> str:
        return self.username or self.get_full_name() or self.email

    # --- Role helpers ---------------------------------------------------------
    def is_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN or self.is_staff or self.is_superuser

    def is_dj(self) -> bool:
        return self.role == self.RoleChoices.DJ


class DjProfile(models.Model):
    """Public DJ profile linked 1:1 to a user account."""

    user = models.OneToOneField(
        CustomUser,
        on_delete=models.CASCADE,
        related_name="dj_profile",
    )
    stage_name = models.CharField(max_length=150)
    bio = models.TextField(blank=True)
    genres = models.JSONField(default=list, blank=True)
    base_price_cents = models.PositiveIntegerField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True)
    is_accepting_bookings = models.BooleanField(default=True)
    is_approved_by_admin = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("DJ profile")
        verbose_name_plural = _("DJ profiles")
        ordering = ["stage_name"]

    def __str__(self) -> str:
        return self.stage_name

    @property
    def is_bookable(self) -> bool:
        return (
            self.is_accepting_bookings
            and self.is_approved_by_admin
            and self.user.status == CustomUser.StatusChoices.ACTIVE
        )

    @classmethod
    def bookable(cls):
        """Queryset of DJs that clients may book."""
        return cls.objects.select_related("user").filter(
            is_accepting_bookings=True,
            is_approved_by_admin=True,
            user__status=CustomUser.StatusChoices.ACTIVE,
        )


User = CustomUser
