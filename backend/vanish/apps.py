from django.apps import AppConfig


class VanishConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vanish"
    verbose_name = "Account Deletion"
