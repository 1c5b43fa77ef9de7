import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("BOOKING_STATUS_CHANGED", "Booking status changed"),
                            ("BOOKING_ACCEPTED", "Booking accepted"),
                            ("BOOKING_DECLINED", "Booking declined"),
                            ("BOOKING_CONFIRMED", "Booking confirmed"),
                            ("BOOKING_TIMEOUT", "Booking request expired"),
                            ("MISSED_BOOKING", "Missed booking"),
                            ("BOOKING_REJECTED", "Booking rejected"),
                            ("REFUND_PROCESSED", "Refund processed"),
                            ("DJ_APPROVED", "DJ approved"),
                            ("DJ_REJECTED", "DJ rejected"),
                            ("GENERAL", "General"),
                        ],
                        default="GENERAL",
                        max_length=40,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("data", models.JSONField(blank=True, default=dict)),
                ("action_url", models.CharField(blank=True, max_length=500)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "is_read"], name="notification_user_read_idx")],
            },
        ),
    ]
