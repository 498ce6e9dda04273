# app_cinema/stats.py
"""
Métricas de ocupación y asistencia por función.

Proyección de solo lectura: se recalcula en cada consulta a partir de
screenings + reservations, nunca se persiste.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from .models import Reservation, Screening
from .schemas import ScreeningStat, ScreeningStatsSummary

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _percent(part: int, whole: int) -> Decimal:
    if not whole:
        return ZERO
    return (Decimal(part) * 100 / Decimal(whole)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def occupancy_rate(total_reservations: int, capacity: int) -> Decimal:
    """Reservas sobre aforo en %, 0 si el aforo es 0."""
    return _percent(total_reservations, capacity)


def attendance_rate(checked_in: int, total_reservations: int) -> Decimal:
    """Asistentes sobre reservas en %, 0 si no hay reservas."""
    return _percent(checked_in, total_reservations)


def annotate_screening_stats(queryset: Optional[QuerySet] = None) -> QuerySet:
    qs = queryset if queryset is not None else Screening.objects.all()
    return (
        qs.select_related("movie")
        .annotate(
            total_reservations=Count("reservations"),
            active_reservations=Count(
                "reservations",
                filter=Q(reservations__status__in=Reservation.ACTIVE_STATUSES),
            ),
            checked_in_count=Count(
                "reservations",
                filter=Q(reservations__status=Reservation.Status.CHECKED_IN),
            ),
        )
        .order_by("starts_at")
    )


def _to_stat(s: Screening) -> ScreeningStat:
    movie = s.movie
    return ScreeningStat(
        screening_id=s.pk,
        movie_id=s.movie_id,
        movie_title=movie.title if movie else None,
        starts_at=s.starts_at,
        ends_at=s.ends_at,
        auditorium=s.auditorium,
        capacity=s.capacity,
        total_reservations=s.total_reservations,
        active_reservations=s.active_reservations,
        checked_in_count=s.checked_in_count,
        occupancy_rate=occupancy_rate(s.total_reservations, s.capacity),
        attendance_rate=attendance_rate(s.checked_in_count, s.total_reservations),
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


def screening_stats(queryset: Optional[QuerySet] = None, *, upcoming_only: bool = False) -> List[ScreeningStat]:
    qs = annotate_screening_stats(queryset)
    if upcoming_only:
        qs = qs.filter(starts_at__gte=timezone.now())
    return [_to_stat(s) for s in qs]


def stats_summary(stats: Iterable[ScreeningStat]) -> ScreeningStatsSummary:
    stats = list(stats)
    if stats:
        average = (sum(s.occupancy_rate for s in stats) / len(stats)).quantize(
            TWO_PLACES, rounding=ROUND_HALF_UP
        )
    else:
        average = ZERO
    return ScreeningStatsSummary(
        screenings=len(stats),
        total_reservations=sum(s.total_reservations for s in stats),
        total_checked_in=sum(s.checked_in_count for s in stats),
        total_capacity=sum(s.capacity for s in stats),
        average_occupancy=average,
    )
