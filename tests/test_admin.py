from decimal import Decimal

from django.contrib.admin.sites import site
from django.test import RequestFactory, TestCase
from django.urls import reverse

from app_cinema.models import Reservation, Screening

from .factories import User, make_movie, make_reservation, make_screening, make_user


class ScreeningAdminTests(TestCase):

    def setUp(self):
        self.superuser = User.objects.create_superuser(email="root@example.com", password="x")
        self.screening = make_screening(make_movie(), capacity=5)
        for i in range(3):
            make_reservation(self.screening, make_user(f"user{i}@example.com"))
        self.model_admin = site._registry[Screening]

    def test_counts_come_from_the_queryset(self):
        request = RequestFactory().get("/admin/app_cinema/screening/")
        request.user = self.superuser
        obj = self.model_admin.get_queryset(request).get(pk=self.screening.pk)

        with self.assertNumQueries(0):
            self.assertEqual(self.model_admin.reserved(obj), 3)
            self.assertEqual(self.model_admin.occupancy(obj), Decimal("60.00"))

    def test_changelist_renders(self):
        self.client.force_login(self.superuser)
        response = self.client.get(reverse("admin:app_cinema_screening_changelist"))
        self.assertEqual(response.status_code, 200)


class ReservationAdminActionTests(TestCase):

    def test_validate_attendance_action(self):
        superuser = User.objects.create_superuser(email="root@example.com", password="x")
        reservation = make_reservation(make_screening(make_movie()), make_user("ana@example.com"))
        self.client.force_login(superuser)

        response = self.client.post(
            reverse("admin:app_cinema_reservation_changelist"),
            {"action": "validate_attendance", "_selected_action": [str(reservation.pk)]},
        )

        self.assertEqual(response.status_code, 302)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, Reservation.Status.CHECKED_IN)
        self.assertEqual(reservation.attendance_log.scanned_by_id, superuser.pk)
