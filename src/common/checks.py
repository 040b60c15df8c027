"""System checks run on startup (runserver, migrate, check)."""

import typing as t

from django.conf import settings
from django.core.checks import CheckMessage, Error, register

REQUIRED_OBJECT_STORAGE_SETTINGS = ("OBJECT_STORAGE_URL", "OBJECT_STORAGE_SERVICE_KEY")


@register()
def check_object_storage_settings(app_configs: t.Any, **kwargs: t.Any) -> list[CheckMessage]:
    """Refuse to start without object storage credentials."""
    errors: list[CheckMessage] = []
    for name in REQUIRED_OBJECT_STORAGE_SETTINGS:
        if not getattr(settings, name, ""):
            errors.append(
                Error(
                    f"{name} is not set.",
                    hint=f"Set the {name} environment variable; ticket PDFs cannot be stored without it.",
                    id="common.E001",
                )
            )
    return errors
