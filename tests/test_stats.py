from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from app_cinema.models import Reservation
from app_cinema.stats import ZERO, attendance_rate, occupancy_rate, screening_stats, stats_summary

from .factories import make_movie, make_reservation, make_screening, make_user


class RateHelperTests(SimpleTestCase):

    def test_zero_guards(self):
        self.assertEqual(occupancy_rate(3, 0), ZERO)
        self.assertEqual(attendance_rate(0, 0), ZERO)

    def test_two_decimals_half_up(self):
        self.assertEqual(occupancy_rate(3, 5), Decimal("60.00"))
        self.assertEqual(attendance_rate(1, 3), Decimal("33.33"))
        self.assertEqual(attendance_rate(2, 3), Decimal("66.67"))
        self.assertEqual(occupancy_rate(1, 8), Decimal("12.50"))
        # 0.00625 -> 0.01
        self.assertEqual(attendance_rate(1, 16000), Decimal("0.01"))

    def test_summary_of_nothing(self):
        summary = stats_summary([])
        self.assertEqual(summary.screenings, 0)
        self.assertEqual(summary.average_occupancy, ZERO)


class ScreeningStatsTests(TestCase):

    def setUp(self):
        self.movie = make_movie("Dune")
        self.screening = make_screening(self.movie, capacity=5, auditorium="Sala 1")
        users = [make_user(f"user{i}@example.com") for i in range(3)]
        make_reservation(self.screening, users[0], status=Reservation.Status.CHECKED_IN)
        make_reservation(self.screening, users[1], status=Reservation.Status.CONFIRMED)
        make_reservation(self.screening, users[2], status=Reservation.Status.PENDING)

    def test_dune_scenario(self):
        [stat] = screening_stats()

        self.assertEqual(stat.screening_id, self.screening.pk)
        self.assertEqual(stat.movie_id, self.movie.pk)
        self.assertEqual(stat.movie_title, "Dune")
        self.assertEqual(stat.auditorium, "Sala 1")
        self.assertEqual(stat.capacity, 5)
        self.assertEqual(stat.total_reservations, 3)
        self.assertEqual(stat.active_reservations, 3)
        self.assertEqual(stat.checked_in_count, 1)
        self.assertEqual(stat.occupancy_rate, Decimal("60.00"))
        self.assertEqual(stat.attendance_rate, Decimal("33.33"))

    def test_cancelled_counts_in_total_but_not_active(self):
        make_reservation(self.screening, make_user("late@example.com"), status=Reservation.Status.CANCELLED)
        [stat] = screening_stats()
        self.assertEqual(stat.total_reservations, 4)
        self.assertEqual(stat.active_reservations, 3)
        self.assertEqual(stat.occupancy_rate, Decimal("80.00"))

    def test_screening_without_reservations(self):
        empty = make_screening(self.movie, capacity=10, starts_in=timedelta(days=2))
        stats = {s.screening_id: s for s in screening_stats()}
        self.assertEqual(stats[empty.pk].total_reservations, 0)
        self.assertEqual(stats[empty.pk].occupancy_rate, ZERO)
        self.assertEqual(stats[empty.pk].attendance_rate, ZERO)

    def test_ordered_by_start_and_upcoming_filter(self):
        past = make_screening(self.movie, starts_in=-timedelta(days=3))
        later = make_screening(self.movie, starts_in=timedelta(days=5))

        ids = [s.screening_id for s in screening_stats()]
        self.assertEqual(ids, [past.pk, self.screening.pk, later.pk])

        upcoming = [s.screening_id for s in screening_stats(upcoming_only=True)]
        self.assertEqual(upcoming, [self.screening.pk, later.pk])

    def test_summary(self):
        make_screening(self.movie, capacity=10, starts_in=timedelta(days=2))

        summary = stats_summary(screening_stats())

        self.assertEqual(summary.screenings, 2)
        self.assertEqual(summary.total_reservations, 3)
        self.assertEqual(summary.total_checked_in, 1)
        self.assertEqual(summary.total_capacity, 15)
        self.assertEqual(summary.average_occupancy, Decimal("30.00"))
        self.assertEqual(summary.model_dump(mode="json")["average_occupancy"], 30.0)
