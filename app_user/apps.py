from django.apps import AppConfig


class UserConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "app_user"
    verbose_name = "Usuarios"

    def ready(self):
        from app_user import signals  # noqa: F401
