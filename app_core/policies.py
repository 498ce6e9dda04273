# app_core/policies.py
"""
Row-level access rules for every table exposed by the data API.

Each table has a policy with two halves:

- ``scope(actor, qs)`` limits which existing rows the actor may read,
  update or delete (rows outside the scope behave as if they did not exist).
- ``check(actor, obj)`` decides whether a row the actor is about to insert,
  or a row as it will look after an update, may be written.

All policies go through ``current_user_is_admin``; there is no admin check
that bypasses it.
"""
from typing import Dict, Optional, Type

from django.db.models import Model, QuerySet

from app_user.models import Profile


def current_user_is_admin(actor) -> bool:
    """True iff a profile exists for ``actor`` with role ``admin``."""
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    return Profile.objects.filter(user_id=actor.pk, role=Profile.ROLE_ADMIN).exists()


class AdminOnlyPolicy:
    """Admins may do everything, everyone else nothing."""

    def scope(self, actor, qs: QuerySet) -> QuerySet:
        if current_user_is_admin(actor):
            return qs
        return qs.none()

    def check(self, actor, obj: Model) -> bool:
        return current_user_is_admin(actor)

    def can_read(self, actor, obj: Optional[Model]) -> bool:
        if obj is None:
            return False
        return self.scope(actor, type(obj)._default_manager.filter(pk=obj.pk)).exists()


class OwnerPolicy(AdminOnlyPolicy):
    """Admin rules plus self-service on rows whose ``owner_field`` is the actor."""

    def __init__(self, owner_field: str):
        self.owner_field = owner_field

    def _owns(self, actor, value) -> bool:
        return actor is not None and getattr(actor, "is_authenticated", False) and value == actor.pk

    def scope(self, actor, qs: QuerySet) -> QuerySet:
        if current_user_is_admin(actor):
            return qs
        if actor is None or not getattr(actor, "is_authenticated", False):
            return qs.none()
        return qs.filter(**{self.owner_field: actor.pk})

    def check(self, actor, obj: Model) -> bool:
        if current_user_is_admin(actor):
            return True
        return self._owns(actor, getattr(obj, self.owner_field, None))


POLICIES: Dict[str, AdminOnlyPolicy] = {
    "app_cinema.Reservation": OwnerPolicy("user_id"),
    "app_user.CustomUser": OwnerPolicy("pk"),
}
_DEFAULT_POLICY = AdminOnlyPolicy()


def policy_for(model: Type[Model]) -> AdminOnlyPolicy:
    return POLICIES.get(model._meta.label, _DEFAULT_POLICY)
