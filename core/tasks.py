"""
Celery tasks for background processing.

Periodic expiry sweep and log pruning.
"""
import logging

from asgiref.sync import async_to_sync
from django.conf import settings

from access_keys.application.commands.maintenance import (
    ExpireOverdueKeysCommand,
    PruneLogsCommand,
)
from access_keys.container import get_container
from core.domain.exceptions import StoreUnavailableError
from GlobalKeyService.celery import app

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def expire_overdue_keys(self):
    """
    Mark every overdue active key as expired.

    Returns:
        Number of keys expired
    """
    try:
        expired = async_to_sync(get_container().expire_overdue.handle)(
            ExpireOverdueKeysCommand()
        )
    except StoreUnavailableError as exc:
        logger.error("Expiry sweep failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    logger.info("Expiry sweep expired %d keys", expired)
    return expired


@app.task(bind=True, max_retries=3)
def prune_old_logs(self, older_than_days=None):
    """
    Remove activity and usage entries older than the retention period.

    Args:
        older_than_days: Retention in days (defaults to LOG_RETENTION_DAYS)

    Returns:
        Number of entries removed
    """
    if older_than_days is None:
        older_than_days = settings.GLOBAL_KEYS.get("LOG_RETENTION_DAYS", 30)
    try:
        cleared = async_to_sync(get_container().prune_logs.handle)(
            PruneLogsCommand(older_than_days=older_than_days)
        )
    except StoreUnavailableError as exc:
        logger.error("Log pruning failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return cleared
