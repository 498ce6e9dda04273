import logging

from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model

from app_user.models import Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=get_user_model())
def create_profile(sender, instance, created, **kwargs):
    if not created:
        return

    # Los superusuarios creados por consola entran directamente como admin
    role = Profile.ROLE_ADMIN if instance.is_superuser else Profile.ROLE_STUDENT
    _, made = Profile.objects.get_or_create(user=instance, defaults={"role": role})
    if made:
        logger.info("profile created for %s with role %s", instance.email, role)
