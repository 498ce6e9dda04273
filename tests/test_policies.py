from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from app_cinema.models import Movie, Reservation
from app_core.policies import current_user_is_admin, policy_for
from app_user.models import Profile

from .factories import User, make_movie, make_reservation, make_screening, make_user


class AdminPredicateTests(TestCase):

    def test_missing_or_anonymous_actor_is_not_admin(self):
        self.assertFalse(current_user_is_admin(None))
        self.assertFalse(current_user_is_admin(AnonymousUser()))

    def test_role_decides(self):
        student = make_user("ana@example.com")
        admin = make_user("staff@example.com", admin=True)
        self.assertFalse(current_user_is_admin(student))
        self.assertTrue(current_user_is_admin(admin))

    def test_staff_flag_alone_is_not_enough(self):
        user = User.objects.create_user(email="desk@example.com", password="x", is_staff=True)
        self.assertFalse(current_user_is_admin(user))
        Profile.objects.filter(user=user).update(role=Profile.ROLE_ADMIN)
        self.assertTrue(current_user_is_admin(user))


class RowPolicyTests(TestCase):

    def setUp(self):
        self.admin = make_user("staff@example.com", admin=True)
        self.ana = make_user("ana@example.com")
        self.bob = make_user("bob@example.com")
        self.screening = make_screening(make_movie())
        self.ana_reservation = make_reservation(self.screening, self.ana)
        self.bob_reservation = make_reservation(self.screening, self.bob)

    def test_admin_only_tables_hide_everything_from_students(self):
        policy = policy_for(Movie)
        self.assertEqual(policy.scope(self.ana, Movie.objects.all()).count(), 0)
        self.assertEqual(policy.scope(self.admin, Movie.objects.all()).count(), 1)
        self.assertFalse(policy.check(self.ana, Movie(title="X")))
        self.assertTrue(policy.check(self.admin, Movie(title="X")))

    def test_reservation_owner_sees_only_own_rows(self):
        policy = policy_for(Reservation)
        visible = list(policy.scope(self.ana, Reservation.objects.all()))
        self.assertEqual(visible, [self.ana_reservation])
        self.assertEqual(policy.scope(self.admin, Reservation.objects.all()).count(), 2)

    def test_reservation_check_requires_ownership(self):
        policy = policy_for(Reservation)
        self.assertTrue(policy.check(self.ana, Reservation(screening=self.screening, user=self.ana)))
        self.assertFalse(policy.check(self.ana, Reservation(screening=self.screening, user=self.bob)))
        self.assertTrue(policy.check(self.admin, Reservation(screening=self.screening, user=self.bob)))

    def test_anonymous_sees_nothing(self):
        policy = policy_for(Reservation)
        self.assertEqual(policy.scope(None, Reservation.objects.all()).count(), 0)
        self.assertFalse(policy.check(None, self.ana_reservation))

    def test_users_are_visible_to_themselves(self):
        policy = policy_for(User)
        self.assertTrue(policy.can_read(self.ana, self.ana))
        self.assertFalse(policy.can_read(self.ana, self.bob))
        self.assertTrue(policy.can_read(self.admin, self.bob))
