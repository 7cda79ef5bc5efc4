"""
KeyStore port (interface).

This defines the contract for key persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncContextManager, List, Optional

from access_keys.domain.key_record import ActivityLogEntry, KeyRecord
from access_keys.domain.store_settings import StoreSettings


class KeyStore(ABC):
    """
    Abstract store for KeyRecord entities, settings and the activity log.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    The store exclusively owns every record; callers receive
    immutable snapshots.
    """

    @abstractmethod
    async def get(self, code: str) -> Optional[KeyRecord]:
        """
        Find a key by its code.

        Args:
            code: Key code

        Returns:
            KeyRecord or None if not found
        """
        pass

    @abstractmethod
    async def get_by_id(self, key_id: str) -> Optional[KeyRecord]:
        """
        Find a key by its identifier.

        Args:
            key_id: Record identifier

        Returns:
            KeyRecord or None if not found
        """
        pass

    @abstractmethod
    async def put(self, record: KeyRecord) -> KeyRecord:
        """
        Insert or replace a record (matched by id).

        Args:
            record: KeyRecord to save

        Returns:
            Saved record

        Raises:
            DuplicateKeyCodeError: If another record already uses the code
        """
        pass

    @abstractmethod
    async def delete(self, key_id: str) -> bool:
        """
        Delete a record.

        Args:
            key_id: Record identifier

        Returns:
            True if a record was removed
        """
        pass

    @abstractmethod
    async def record_use(
        self, record: KeyRecord, activity: Optional[ActivityLogEntry] = None
    ) -> KeyRecord:
        """
        Replace a consumed record and append its activity entry in one write.

        Either both changes are persisted or neither is.

        Args:
            record: Record carrying the decremented counter and new usage entry
            activity: Activity entry to append (None when logging is off)

        Returns:
            Saved record

        Raises:
            StoreUnavailableError: If the record is gone or the write fails
        """
        pass

    @abstractmethod
    async def append_activity(self, entry: ActivityLogEntry) -> None:
        """Append an activity entry, keeping only the most recent ones."""
        pass

    @abstractmethod
    async def list_all(self) -> List[KeyRecord]:
        """List every record, newest first."""
        pass

    @abstractmethod
    async def list_activity(self) -> List[ActivityLogEntry]:
        """List activity entries, oldest first."""
        pass

    @abstractmethod
    async def settings(self) -> StoreSettings:
        """Current settings (created with defaults on first access)."""
        pass

    @abstractmethod
    async def update_settings(self, **changes) -> StoreSettings:
        """Apply a partial settings update and return the new settings."""
        pass

    @abstractmethod
    async def add_revenue(self, amount: float) -> float:
        """Add to the running revenue total and return it."""
        pass

    @abstractmethod
    async def revenue(self) -> float:
        """Running revenue total."""
        pass

    @abstractmethod
    async def prune_logs(self, before: datetime) -> int:
        """
        Drop activity and usage entries older than ``before``.

        Returns:
            Number of entries removed
        """
        pass

    @abstractmethod
    def lock(self, code: str) -> AsyncContextManager:
        """
        Critical section for one key.

        Concurrent read-evaluate-write sequences on the same key must
        run inside this context; different keys never contend.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the store. Later operations fail."""
        pass
