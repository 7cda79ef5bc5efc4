"""
Test settings for GlobalKeyService.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Empty path selects the in-memory document backend
GLOBAL_KEYS = {
    **GLOBAL_KEYS,  # noqa: F405
    "DATABASE_PATH": "",
    "BACKUP_DIR": "",
    "DEFAULT_ADMIN_PASSWORD": "admin123",
}

CELERY_TASK_ALWAYS_EAGER = True

# Disable logging during tests
LOGGING_CONFIG = None
