"""
App configuration for access keys.
"""
import atexit
import logging

from django.apps import AppConfig
from django.conf import settings


class AccessKeysConfig(AppConfig):
    """App configuration for access_keys."""

    name = "access_keys"
    verbose_name = "Access Keys"
    container = None

    def ready(self):
        """Build the key service container once Django is set up."""
        from access_keys.container import build_container

        self.container = build_container(settings.GLOBAL_KEYS)
        atexit.register(self.container.close)
        logging.getLogger(__name__).info("Access key container ready")
