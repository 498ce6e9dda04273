import re
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from app_cinema.models import AttendanceLog, Movie, Reservation, Screening
from app_user.models import Profile

from .factories import User, make_movie, make_reservation, make_screening, make_user


class ProfileSignalTests(TestCase):

    def test_new_user_gets_student_profile(self):
        user = User.objects.create_user(email="ana@example.com", password="x")
        profile = Profile.objects.get(user=user)
        self.assertEqual(profile.role, Profile.ROLE_STUDENT)
        self.assertFalse(profile.is_admin)

    def test_superuser_gets_admin_profile(self):
        user = User.objects.create_superuser(email="root@example.com", password="x")
        self.assertEqual(Profile.objects.get(user=user).role, Profile.ROLE_ADMIN)

    def test_saving_again_keeps_a_single_profile(self):
        user = make_user("ana@example.com")
        user.is_staff = True
        user.save()
        self.assertEqual(Profile.objects.filter(user=user).count(), 1)


class MovieConstraintTests(TestCase):

    def test_duration_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Movie.objects.create(title="Corto", duration_minutes=0)

    def test_duration_is_optional(self):
        movie = Movie.objects.create(title="Sin duración")
        self.assertIsNone(movie.duration_minutes)
        self.assertTrue(movie.is_active)


class ScreeningConstraintTests(TestCase):

    def setUp(self):
        self.movie = make_movie()

    def test_capacity_zero_is_rejected(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_screening(self.movie, capacity=0)

    def test_ends_at_must_be_after_starts_at(self):
        starts_at = timezone.now() + timedelta(days=1)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Screening.objects.create(
                    movie=self.movie, starts_at=starts_at, ends_at=starts_at,
                    auditorium="Sala 1", capacity=10,
                )

    def test_full_clean_reports_capacity_check(self):
        screening = Screening(
            movie=self.movie, starts_at=timezone.now(), auditorium="Sala 1", capacity=0,
        )
        with self.assertRaises(ValidationError):
            screening.full_clean()

    def test_deleting_movie_cascades_to_screenings(self):
        make_screening(self.movie)
        self.movie.delete()
        self.assertEqual(Screening.objects.count(), 0)


class ReservationTests(TestCase):

    def setUp(self):
        self.user = make_user("ana@example.com")
        self.screening = make_screening(make_movie())

    def test_defaults(self):
        reservation = make_reservation(self.screening, self.user)
        self.assertEqual(reservation.status, Reservation.Status.CONFIRMED)
        self.assertIsNotNone(reservation.reserved_at)
        self.assertRegex(reservation.qr_token, re.compile(r"^[0-9a-f]{16}$"))

    def test_tokens_are_unique_per_reservation(self):
        other = make_user("bob@example.com")
        first = make_reservation(self.screening, self.user)
        second = make_reservation(self.screening, other)
        self.assertNotEqual(first.qr_token, second.qr_token)

    def test_duplicate_user_screening_pair_fails(self):
        make_reservation(self.screening, self.user)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_reservation(self.screening, self.user, status=Reservation.Status.PENDING)

    def test_duplicate_token_fails(self):
        first = make_reservation(self.screening, self.user)
        other_screening = make_screening(make_movie("Arrival"))
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Reservation.objects.create(
                    screening=other_screening, user=self.user, qr_token=first.qr_token,
                )

    def test_no_show_counts_as_active(self):
        self.assertIn(Reservation.Status.NO_SHOW, Reservation.ACTIVE_STATUSES)
        self.assertNotIn(Reservation.Status.CANCELLED, Reservation.ACTIVE_STATUSES)


class AttendanceLogTests(TestCase):

    def setUp(self):
        self.admin = make_user("staff@example.com", admin=True)
        self.reservation = make_reservation(make_screening(make_movie()), make_user("ana@example.com"))

    def test_one_log_per_reservation(self):
        AttendanceLog.objects.create(reservation=self.reservation, scanned_by=self.admin)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                AttendanceLog.objects.create(reservation=self.reservation, scanned_by=self.admin)

    def test_deleting_scanner_keeps_the_log(self):
        log = AttendanceLog.objects.create(reservation=self.reservation, scanned_by=self.admin)
        self.admin.delete()
        log.refresh_from_db()
        self.assertIsNone(log.scanned_by_id)
