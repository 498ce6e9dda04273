from datetime import timedelta

from django.contrib.auth import get_user_model
from django.utils import timezone

from app_cinema.models import Movie, Reservation, Screening
from app_user.models import Profile

User = get_user_model()

PASSWORD = "cinema-pass-1234"


def make_user(email, *, admin=False):
    user = User.objects.create_user(email=email, password=PASSWORD)
    if admin:
        Profile.objects.filter(user=user).update(role=Profile.ROLE_ADMIN)
    return user


def make_movie(title="Dune: Part Two", **kwargs):
    kwargs.setdefault("duration_minutes", 166)
    return Movie.objects.create(title=title, **kwargs)


def make_screening(movie, *, capacity=5, starts_in=timedelta(days=1), **kwargs):
    starts_at = timezone.now() + starts_in
    kwargs.setdefault("auditorium", "Sala 1")
    return Screening.objects.create(movie=movie, starts_at=starts_at, capacity=capacity, **kwargs)


def make_reservation(screening, user, **kwargs):
    return Reservation.objects.create(screening=screening, user=user, **kwargs)
