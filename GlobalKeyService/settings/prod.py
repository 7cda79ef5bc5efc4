"""
Production settings for GlobalKeyService.
"""

import os

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")

# Security settings
SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "true").lower() == "true"
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

if "SECRET_KEY" not in os.environ:
    raise RuntimeError("SECRET_KEY must be set in production")

if os.environ.get("GLOBAL_KEYS_ADMIN_PASSWORD") is None:
    raise RuntimeError("GLOBAL_KEYS_ADMIN_PASSWORD must be set in production")

LOGGING = get_logging_config("production")  # noqa: F405
