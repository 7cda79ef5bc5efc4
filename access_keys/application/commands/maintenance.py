"""
Maintenance commands.

Commands run by the periodic sweep and by operators.
"""
from dataclasses import dataclass


@dataclass
class ExpireOverdueKeysCommand:
    """Command to mark every overdue active key as expired."""

    dry_run: bool = False


@dataclass
class PruneLogsCommand:
    """Command to remove activity and usage entries older than a cutoff."""

    older_than_days: int = 30
