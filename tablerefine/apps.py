"""
Django app configuration for django-tablerefine.

Validates the ``TABLEREFINE`` setting when the project starts.
"""

import logging

from django.apps import AppConfig as BaseAppConfig
from django.conf import settings

from .config import find_key_conflicts, get_table_settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Django app configuration for django-tablerefine."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tablerefine"
    verbose_name = "Table Refine"
    label = "tablerefine"

    def ready(self):
        table_settings = get_table_settings()
        conflicts = find_key_conflicts(table_settings)
        if conflicts:
            message = "Conflicting TABLEREFINE wire keys: " + "; ".join(conflicts)
            logger.error(message)
            if getattr(settings, "DEBUG", False):
                raise ConfigurationError(message)
            return
        logger.info(
            "Table refine ready (paginator=%s, per_page=%s)",
            table_settings.paginator,
            table_settings.per_page,
        )
