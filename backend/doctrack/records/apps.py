from django.apps import AppConfig


class RecordsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "doctrack.records"
    label = "records"
    verbose_name = "Tracked records"
