from django.db.models import *
from django.contrib.auth.models import AbstractUser
from django.utils.translation import gettext_lazy as _
from app_core.models import AutoDateTimeIdAbstract
from .managers import CustomUserManager



class CustomUser(AbstractUser):
    username = None
    first_name = None
    last_name = None
    email = EmailField(_('email address'), unique=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()


    class Meta:
        ordering = ('id',)
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.email


class Profile(AutoDateTimeIdAbstract):
    """Datos de la persona y rol usado en las reglas de autorización."""

    ROLE_ADMIN = "admin"
    ROLE_STUDENT = "student"

    user = OneToOneField(CustomUser, on_delete=CASCADE, related_name="profile", verbose_name='Usuario')
    first_name = CharField(max_length=150, blank=True, null=True, verbose_name='Nombre')
    last_name = CharField(max_length=150, blank=True, null=True, verbose_name='Apellido')
    role = CharField(
        max_length=50,
        default=ROLE_STUDENT,
        db_index=True,
        help_text="Role used for authorization (e.g., admin, student).",
    )

    class Meta:
        db_table = "profiles"
        ordering = ("created_at",)
        verbose_name = 'Perfil'
        verbose_name_plural = 'Perfiles'

    def __str__(self):
        full_name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return f"{full_name or self.user.email} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN
