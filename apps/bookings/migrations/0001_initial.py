import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(max_length=100)),
                ("event_date", models.DateTimeField()),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("ACCEPTED", "Accepted"),
                            ("CONFIRMED", "Confirmed"),
                            ("DECLINED", "Declined"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("package_key", models.CharField(blank=True, max_length=50)),
                ("quoted_price_cents", models.PositiveIntegerField(blank=True, null=True)),
                ("message", models.TextField(blank=True)),
                (
                    "details",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Free-form event details, e.g. preferred_genres.",
                    ),
                ),
                ("is_paid", models.BooleanField(default=False)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("checkout_session_id", models.CharField(blank=True, max_length=255, null=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=500)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cancelled_by",
                    models.CharField(
                        blank=True,
                        choices=[("CLIENT", "Client"), ("DJ", "DJ"), ("ADMIN", "Admin"), ("SYSTEM", "System")],
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "dj",
                    models.ForeignKey(
                        blank=True,
                        help_text="Unassigned until the booking is accepted.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="users.djprofile",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="booking_status_created_idx"),
                    models.Index(fields=["client", "event_date"], name="booking_client_event_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("is_paid", False), ("status", "CONFIRMED"), _connector="OR"),
                        name="booking_paid_only_when_confirmed",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingRecovery",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "recovery_type",
                    models.CharField(
                        choices=[
                            ("EXTEND_DJ", "Extend a confirmed DJ"),
                            ("NEW_DJ", "Book a replacement DJ"),
                            ("REFUND", "Refund"),
                        ],
                        max_length=20,
                    ),
                ),
                ("message", models.TextField()),
                ("action_url", models.CharField(blank=True, max_length=500)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("ACCEPTED", "Accepted"), ("DECLINED", "Declined")],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("client_response", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "original_booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recoveries",
                        to="bookings.booking",
                    ),
                ),
                (
                    "suggested_dj",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="recovery_suggestions",
                        to="users.djprofile",
                    ),
                ),
                (
                    "target_booking",
                    models.ForeignKey(
                        blank=True,
                        help_text="Confirmed booking to extend for EXTEND_DJ suggestions.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking recovery",
                "verbose_name_plural": "Booking recoveries",
                "ordering": ["-created_at"],
            },
        ),
    ]
