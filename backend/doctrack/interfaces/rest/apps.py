from django.apps import AppConfig


class RestInterfaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "doctrack.interfaces.rest"
    verbose_name = "DocTrack REST API"
