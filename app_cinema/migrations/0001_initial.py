import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import app_cinema.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Movie",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado el")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.TextField()),
                ("synopsis", models.TextField(blank=True, null=True)),
                ("duration_minutes", models.IntegerField(blank=True, help_text="Total runtime of the movie in minutes.", null=True)),
                ("rating", models.TextField(blank=True, null=True)),
                ("poster_url", models.TextField(blank=True, help_text="Optional path to the movie poster asset.", null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name_plural": "Movies",
                "db_table": "movies",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("duration_minutes__isnull", True), ("duration_minutes__gt", 0), _connector="OR"),
                        name="movies_duration_minutes_check",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Screening",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado el")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("starts_at", models.DateTimeField(help_text="UTC start time for the screening.")),
                ("ends_at", models.DateTimeField(blank=True, help_text="UTC end time for the screening (optional).", null=True)),
                ("auditorium", models.TextField()),
                ("capacity", models.IntegerField(help_text="Total number of seats available for the screening.")),
                ("notes", models.TextField(blank=True, null=True)),
                ("movie", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="screenings", to="app_cinema.movie")),
            ],
            options={
                "verbose_name_plural": "Screenings",
                "db_table": "screenings",
                "ordering": ["starts_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("capacity__gt", 0)), name="screenings_capacity_check"),
                    models.CheckConstraint(
                        condition=models.Q(("ends_at__isnull", True), ("ends_at__gt", models.F("starts_at")), _connector="OR"),
                        name="screenings_time_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado el")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("confirmed", "Confirmed"),
                        ("cancelled", "Cancelled"),
                        ("checked_in", "Checked in"),
                        ("no_show", "No show"),
                    ],
                    default="confirmed",
                    help_text="Lifecycle state of the reservation.",
                    max_length=20,
                )),
                ("seat_label", models.TextField(blank=True, null=True)),
                ("qr_token", models.TextField(default=app_cinema.models.generate_qr_token, editable=False, help_text="Unique token encoded into the reservation QR code.")),
                ("reserved_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("screening", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reservations", to="app_cinema.screening")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reservations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "Reservations",
                "db_table": "reservations",
                "ordering": ["-reserved_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("screening", "user"), name="reservations_user_screening_unique"),
                    models.UniqueConstraint(fields=("qr_token",), name="reservations_qr_token_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttendanceLog",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Actualizado el")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("scanned_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reservation", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="attendance_log", to="app_cinema.reservation")),
                ("scanned_by", models.ForeignKey(
                    blank=True,
                    db_column="scanned_by",
                    help_text="Admin user responsible for validating the QR code.",
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="scans",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "verbose_name_plural": "Attendance logs",
                "db_table": "attendance_logs",
                "ordering": ["-scanned_at"],
            },
        ),
    ]
