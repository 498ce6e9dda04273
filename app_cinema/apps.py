"""
Application configuration for the cinema app.
"""

from django.apps import AppConfig


class CinemaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "app_cinema"
    verbose_name = "Cine"
