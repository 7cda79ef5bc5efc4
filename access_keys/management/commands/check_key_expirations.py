"""
Django management command to check and mark expired keys.

This command should be run periodically (e.g., via cron or Celery beat).
"""

import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from access_keys.application.commands.maintenance import ExpireOverdueKeysCommand
from access_keys.application.services.activity_recorder import utc_now
from access_keys.container import get_container
from access_keys.domain.lifecycle import overdue
from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check and mark expired keys."""

    help = "Check and mark expired keys"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually update keys",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        container = get_container()

        try:
            if dry_run:
                candidates = overdue(async_to_sync(container.store.list_all)(), utc_now())
                self.stdout.write(f"Found {len(candidates)} expired key(s)")
                self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
                for record in candidates[:10]:
                    self.stdout.write(f"  - Key {record.code} expired at {record.expires_at}")
                return

            expired = async_to_sync(container.expire_overdue.handle)(ExpireOverdueKeysCommand())
        except StoreUnavailableError as e:
            raise CommandError(str(e)) from e

        if not expired:
            self.stdout.write(self.style.SUCCESS("No expired keys to update"))
            return
        self.stdout.write(self.style.SUCCESS(f"Successfully marked {expired} key(s) as expired"))
