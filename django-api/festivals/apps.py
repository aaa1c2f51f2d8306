from django.apps import AppConfig


class FestivalsConfig(AppConfig):
    name = "festivals"
    verbose_name = "Festivals"
    default_auto_field = "django.db.models.BigAutoField"
