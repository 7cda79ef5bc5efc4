"""
App configuration for Global Key Service.
"""
import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

SKIPPED_COMMANDS = ["migrate", "makemigrations", "collectstatic", "shell", "check"]


class GlobalKeyServiceConfig(AppConfig):
    """App configuration for GlobalKeyService."""

    name = "GlobalKeyService"
    verbose_name = "Global Key Service"

    def ready(self):
        """Set up observability when serving."""
        if len(sys.argv) > 1 and sys.argv[1] in SKIPPED_COMMANDS:
            return

        # The autoreloader's parent process does not serve requests
        if os.environ.get("RUN_MAIN") == "false":
            return

        if getattr(self, "_initialized", False):
            return

        from core.instrumentation import setup_opentelemetry

        logger.info("Setting up observability...")
        setup_opentelemetry()
        self._initialized = True
        logger.info("Observability setup complete")
