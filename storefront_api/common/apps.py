from django.apps import AppConfig
from django.conf import settings


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self):
        from .logging import configure_logging

        configure_logging(
            level=getattr(settings, "LOG_LEVEL", "INFO"),
            json=getattr(settings, "LOG_JSON", False),
        )
