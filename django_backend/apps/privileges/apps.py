from django.apps import AppConfig


class PrivilegesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.privileges"
