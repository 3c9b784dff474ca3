from django.apps import AppConfig


class ProgressConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "progress"

    def ready(self):
        # Connects the quiz outcome receiver
        import progress.signals  # noqa: F401
