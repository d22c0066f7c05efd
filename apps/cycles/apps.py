from django.apps import AppConfig


class CyclesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cycles"
    verbose_name = "Cycles de vente"
