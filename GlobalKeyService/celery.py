"""
Celery configuration for background tasks.

Used for the periodic expiry sweep and log pruning.
"""
import os

from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "GlobalKeyService.settings.base")

app = Celery("GlobalKeyService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "expire-overdue-keys": {
        "task": "core.tasks.expire_overdue_keys",
        "schedule": crontab(minute=0),
    },
    "prune-old-logs": {
        "task": "core.tasks.prune_old_logs",
        "schedule": crontab(minute=30, hour=3),
    },
}
