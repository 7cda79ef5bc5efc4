"""
Activity recorder.

Writes store-wide activity entries when logging is enabled.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from access_keys.domain.key_record import ActivityLogEntry
from access_keys.ports.key_store import KeyStore
from core.domain.value_objects import ActivityType

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current aware UTC time."""
    return datetime.now(timezone.utc)


class ActivityRecorder:
    """Service for appending activity log entries."""

    def __init__(self, store: KeyStore, clock: Callable[[], datetime] = utc_now):
        """Initialize recorder with the store."""
        self.store = store
        self.clock = clock

    async def entry(
        self, message: str, type: ActivityType = ActivityType.INFO
    ) -> Optional[ActivityLogEntry]:
        """Build an activity entry, or None when logging is disabled."""
        settings = await self.store.settings()
        if not settings.enable_logging:
            logger.debug("Activity logging disabled, dropping: %s", message)
            return None
        return ActivityLogEntry(self.clock(), message, type)

    async def record(self, message: str, type: ActivityType = ActivityType.INFO) -> bool:
        """
        Append an activity entry.

        Args:
            message: Activity message
            type: Entry type

        Returns:
            True if the entry was written, False when logging is disabled
        """
        entry = await self.entry(message, type)
        if entry is None:
            return False
        await self.store.append_activity(entry)
        return True
