# ranks/apps.py
"""Ranks app configuration."""

from django.apps import AppConfig


class RanksConfig(AppConfig):
    """Configuration for the ranks app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ranks"
    verbose_name = "Ranks & Route Manifests"

    def ready(self):
        # Importing the registry assembles it once and fails startup if a
        # rank has no manifest.
        from ranks import manifest  # noqa: F401
