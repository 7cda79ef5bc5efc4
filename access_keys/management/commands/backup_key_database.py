"""
Django management command to back up the key database file.

Only the newest backups are kept.
"""

from django.core.management.base import BaseCommand, CommandError

from access_keys.container import get_container
from access_keys.infrastructure.backends import FileDocumentBackend


class Command(BaseCommand):
    """Command to write a timestamped copy of the key database."""

    help = "Back up the key database"

    def add_arguments(self, parser):
        parser.add_argument("--keep", type=int, default=None, help="Number of backups to keep")
        parser.add_argument("--dir", dest="directory", default=None, help="Backup directory")

    def handle(self, *args, **options):
        container = get_container()
        if not isinstance(container.backend, FileDocumentBackend):
            raise CommandError("Backups need a file-backed key database (set DATABASE_PATH)")

        directory = options["directory"] or container.backup_dir
        if not directory:
            raise CommandError("No backup directory configured (set BACKUP_DIR or pass --dir)")

        keep = options["keep"] if options["keep"] is not None else container.backup_keep
        if keep < 1:
            raise CommandError("--keep must be at least 1")

        try:
            target = container.backend.backup(directory, keep=keep)
        except (OSError, ValueError) as e:
            raise CommandError(f"Backup failed: {e}") from e
        self.stdout.write(self.style.SUCCESS(f"Backup written to {target}"))
