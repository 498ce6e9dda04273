import secrets

from django.db.models import *
from django.conf import settings
from django.utils import timezone
from app_core.models import AutoDateTimeIdAbstract


def generate_qr_token() -> str:
    """16 caracteres hex en minúscula (8 bytes aleatorios)."""
    return secrets.token_hex(8)


class Movie(AutoDateTimeIdAbstract):
    """Película del catálogo disponible para programar funciones."""

    title = TextField()
    synopsis = TextField(null=True, blank=True)
    duration_minutes = IntegerField(
        null=True, blank=True, help_text="Total runtime of the movie in minutes."
    )
    rating = TextField(null=True, blank=True)
    poster_url = TextField(
        null=True, blank=True, help_text="Optional path to the movie poster asset."
    )
    is_active = BooleanField(default=True)

    class Meta:
        db_table = "movies"
        verbose_name_plural = "Movies"
        ordering = ["-created_at"]
        constraints = [
            CheckConstraint(
                condition=Q(duration_minutes__isnull=True) | Q(duration_minutes__gt=0),
                name="movies_duration_minutes_check",
            ),
        ]

    def __str__(self) -> str:
        return self.title


class Screening(AutoDateTimeIdAbstract):
    """Función programada de una película: horario, sala y aforo."""

    movie = ForeignKey(Movie, on_delete=CASCADE, related_name="screenings")
    starts_at = DateTimeField(help_text="UTC start time for the screening.")
    ends_at = DateTimeField(
        null=True, blank=True, help_text="UTC end time for the screening (optional)."
    )
    auditorium = TextField()
    capacity = IntegerField(help_text="Total number of seats available for the screening.")
    notes = TextField(null=True, blank=True)

    class Meta:
        db_table = "screenings"
        verbose_name_plural = "Screenings"
        ordering = ["starts_at"]
        constraints = [
            CheckConstraint(condition=Q(capacity__gt=0), name="screenings_capacity_check"),
            CheckConstraint(
                condition=Q(ends_at__isnull=True) | Q(ends_at__gt=F("starts_at")),
                name="screenings_time_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.movie.title} ({self.starts_at:%Y-%m-%d %H:%M}, {self.auditorium})"


class Reservation(AutoDateTimeIdAbstract):
    """Reserva de un usuario para una función, identificada por su token QR."""

    class Status(TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        CHECKED_IN = "checked_in", "Checked in"
        NO_SHOW = "no_show", "No show"

    # Todo lo que no está cancelado ocupa un lugar
    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED, Status.CHECKED_IN, Status.NO_SHOW)

    screening = ForeignKey(Screening, on_delete=CASCADE, related_name="reservations")
    user = ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=CASCADE,
        related_name="reservations",
    )
    status = CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
        help_text="Lifecycle state of the reservation.",
    )
    seat_label = TextField(null=True, blank=True)
    qr_token = TextField(
        default=generate_qr_token,
        editable=False,
        help_text="Unique token encoded into the reservation QR code.",
    )
    reserved_at = DateTimeField(default=timezone.now)

    class Meta:
        db_table = "reservations"
        verbose_name_plural = "Reservations"
        ordering = ["-reserved_at"]
        constraints = [
            UniqueConstraint(fields=["screening", "user"], name="reservations_user_screening_unique"),
            UniqueConstraint(fields=["qr_token"], name="reservations_qr_token_unique"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.qr_token} [{self.status}]"


class AttendanceLog(AutoDateTimeIdAbstract):
    """Registro inmutable de una validación QR exitosa en la entrada."""

    reservation = OneToOneField(
        Reservation,
        on_delete=CASCADE,
        related_name="attendance_log",
    )
    scanned_by = ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=SET_NULL,
        null=True,
        blank=True,
        related_name="scans",
        db_column="scanned_by",
        help_text="Admin user responsible for validating the QR code.",
    )
    scanned_at = DateTimeField(default=timezone.now)

    class Meta:
        db_table = "attendance_logs"
        verbose_name_plural = "Attendance logs"
        ordering = ["-scanned_at"]

    def __str__(self) -> str:
        return f"Check-in {self.reservation_id} at {self.scanned_at}"
