"""
Django management command to remove old activity and usage log entries.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from access_keys.application.commands.maintenance import PruneLogsCommand
from access_keys.container import get_container
from core.domain.exceptions import DomainException


class Command(BaseCommand):
    """Command to prune old log entries."""

    help = "Remove activity and usage log entries older than N days"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=settings.GLOBAL_KEYS.get("LOG_RETENTION_DAYS", 30),
            help="Retention period in days (default: 30)",
        )

    def handle(self, *args, **options):
        try:
            cleared = async_to_sync(get_container().prune_logs.handle)(
                PruneLogsCommand(older_than_days=options["days"])
            )
        except DomainException as e:
            raise CommandError(e.message) from e
        self.stdout.write(self.style.SUCCESS(f"Cleared {cleared} old logs"))
