from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Configuration for the common app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self) -> None:
        """Register system checks.

        Called once Django is fully loaded.
        """
        from common import checks  # noqa: F401
