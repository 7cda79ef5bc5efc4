"""
Administrative command handlers.

Handlers for key creation, the revoke/reactivate/delete lifecycle,
settings updates and the maintenance sweeps.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from access_keys.application.commands.create_key import CreateKeyCommand
from access_keys.application.commands.key_lifecycle import (
    DeleteKeyCommand,
    ReactivateKeyCommand,
    RevokeKeyCommand,
)
from access_keys.application.commands.maintenance import (
    ExpireOverdueKeysCommand,
    PruneLogsCommand,
)
from access_keys.application.commands.update_settings import UpdateSettingsCommand
from access_keys.application.services.activity_recorder import ActivityRecorder, utc_now
from access_keys.domain.key_record import KeyRecord, generate_key_code
from access_keys.domain.lifecycle import overdue
from access_keys.domain.services import AdminAuthenticator, KeyIssuer
from access_keys.domain.store_settings import StoreSettings
from access_keys.ports.key_store import KeyStore
from core.domain.exceptions import (
    DuplicateKeyCodeError,
    InvalidKeyParametersError,
    KeyNotFoundError,
)
from core.domain.value_objects import ActivityType, KeyStatus
from core.infrastructure.locks import ThreadSafeAsyncLock
from core.metrics import keys_created_total, keys_expired_total, keys_revoked_total

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 10


class CreateKeyHandler:
    """Handler for CreateKeyCommand."""

    def __init__(
        self,
        store: KeyStore,
        clock: Callable[[], datetime] = utc_now,
        activity: Optional[ActivityRecorder] = None,
        code_generator: Callable[[], str] = generate_key_code,
    ):
        """Initialize handler with the store."""
        self.store = store
        self.clock = clock
        self.activity = activity or ActivityRecorder(store, clock)
        self.code_generator = code_generator

    async def handle(self, command: CreateKeyCommand) -> KeyRecord:
        """
        Handle create key command.

        A generated code that is already taken is regenerated.

        Args:
            command: CreateKeyCommand

        Returns:
            Created KeyRecord

        Raises:
            InvalidKeyParametersError: If parameters are rejected
            DuplicateKeyCodeError: If no free code could be generated
        """
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = self.code_generator()
            async with self.store.lock(code):
                if await self.store.get(code) is not None:
                    logger.warning("Generated code collision on attempt %d", attempt)
                    continue
                record = KeyIssuer.issue(
                    duration_days=command.duration_days,
                    uses_limit=command.uses_limit,
                    code=code,
                    now=self.clock(),
                    price=command.price,
                    customer_name=command.customer_name,
                    customer_email=command.customer_email,
                    notes=command.notes,
                )
                try:
                    record = await self.store.put(record)
                except DuplicateKeyCodeError:
                    logger.warning("Generated code collision on attempt %d", attempt)
                    continue
            break
        else:
            raise DuplicateKeyCodeError(
                f"Could not generate a unique key code after {MAX_CODE_ATTEMPTS} attempts"
            )

        await self.store.add_revenue(record.price)
        await self.activity.record(
            f"Generated new key: {record.code} for {record.duration_days} days "
            f"(${record.price:.2f})",
            ActivityType.SUCCESS,
        )
        keys_created_total.inc()
        logger.info("Created key %s (id=%s)", record.code, record.id)
        return record


class _KeyMutationHandler:
    """Shared lookup-and-lock for handlers that change one existing key."""

    def __init__(
        self,
        store: KeyStore,
        clock: Callable[[], datetime] = utc_now,
        activity: Optional[ActivityRecorder] = None,
    ):
        """Initialize handler with the store."""
        self.store = store
        self.activity = activity or ActivityRecorder(store, clock)

    async def _find(self, key_id: str) -> KeyRecord:
        record = await self.store.get_by_id(key_id)
        if record is None:
            raise KeyNotFoundError(f"Key {key_id} not found")
        return record


class RevokeKeyHandler(_KeyMutationHandler):
    """Handler for RevokeKeyCommand."""

    async def handle(self, command: RevokeKeyCommand) -> KeyRecord:
        """
        Handle revoke key command.

        Raises:
            KeyNotFoundError: If the key does not exist
        """
        record = await self._find(command.key_id)
        async with self.store.lock(record.code):
            record = await self._find(command.key_id)
            revoked = await self.store.put(record.revoke())

        await self.activity.record(f"Revoked key: {revoked.code}", ActivityType.WARNING)
        keys_revoked_total.inc()
        logger.info("Revoked key %s", revoked.code)
        return revoked


class ReactivateKeyHandler(_KeyMutationHandler):
    """Handler for ReactivateKeyCommand."""

    async def handle(self, command: ReactivateKeyCommand) -> KeyRecord:
        """
        Handle reactivate key command.

        An expired key that is reactivated stays past its expiry time
        and is expired again on the next validation.

        Raises:
            KeyNotFoundError: If the key does not exist
        """
        record = await self._find(command.key_id)
        async with self.store.lock(record.code):
            record = await self._find(command.key_id)
            activated = await self.store.put(record.reactivate())

        await self.activity.record(f"Activated key: {activated.code}", ActivityType.SUCCESS)
        logger.info("Reactivated key %s", activated.code)
        return activated


class DeleteKeyHandler(_KeyMutationHandler):
    """Handler for DeleteKeyCommand."""

    async def handle(self, command: DeleteKeyCommand) -> KeyRecord:
        """
        Handle delete key command.

        Returns:
            The deleted KeyRecord

        Raises:
            KeyNotFoundError: If the key does not exist
        """
        record = await self._find(command.key_id)
        async with self.store.lock(record.code):
            record = await self._find(command.key_id)
            await self.store.delete(record.id)

        await self.activity.record(f"Deleted key: {record.code}", ActivityType.WARNING)
        logger.info("Deleted key %s", record.code)
        return record


class UpdateSettingsHandler:
    """
    Handler for UpdateSettingsCommand.

    Settings have a single writer: updates are serialized by a
    dedicated lock and re-verify the credential inside it.
    """

    def __init__(self, store: KeyStore, activity: Optional[ActivityRecorder] = None):
        """Initialize handler with the store."""
        self.store = store
        self.activity = activity or ActivityRecorder(store)
        self._lock = ThreadSafeAsyncLock()

    async def handle(self, command: UpdateSettingsCommand) -> StoreSettings:
        """
        Handle update settings command.

        Raises:
            UnauthorizedError: If the admin password is wrong
            InvalidKeyParametersError: If the new password is empty
        """
        if command.new_admin_password is not None and not command.new_admin_password.strip():
            raise InvalidKeyParametersError("Admin password cannot be empty")

        async with self._lock:
            AdminAuthenticator.verify(await self.store.settings(), command.admin_password)
            updated = await self.store.update_settings(
                redirect_url=command.redirect_url,
                auto_expire=command.auto_expire,
                enable_logging=command.enable_logging,
                admin_password=command.new_admin_password,
            )

        await self.activity.record("Settings updated", ActivityType.INFO)
        logger.info("Store settings updated")
        return updated


class ExpireOverdueKeysHandler:
    """Handler for ExpireOverdueKeysCommand."""

    def __init__(
        self,
        store: KeyStore,
        clock: Callable[[], datetime] = utc_now,
        activity: Optional[ActivityRecorder] = None,
    ):
        """Initialize handler with the store."""
        self.store = store
        self.clock = clock
        self.activity = activity or ActivityRecorder(store, clock)

    async def handle(self, command: ExpireOverdueKeysCommand) -> int:
        """
        Handle the expiry sweep.

        Args:
            command: ExpireOverdueKeysCommand

        Returns:
            Number of keys expired (or that would be, on a dry run)
        """
        now = self.clock()
        candidates = overdue(await self.store.list_all(), now)
        if command.dry_run:
            return len(candidates)

        expired = 0
        for candidate in candidates:
            async with self.store.lock(candidate.code):
                record = await self.store.get_by_id(candidate.id)
                if record is None or record.status != KeyStatus.ACTIVE or not record.is_overdue(now):
                    continue
                await self.store.put(record.mark_expired())
                expired += 1

        if expired:
            keys_expired_total.labels(trigger="sweep").inc(expired)
            await self.activity.record(
                f"Auto-revoked {expired} expired keys", ActivityType.WARNING
            )
        logger.info("Expiry sweep marked %d keys expired", expired)
        return expired


class PruneLogsHandler:
    """Handler for PruneLogsCommand."""

    def __init__(
        self,
        store: KeyStore,
        clock: Callable[[], datetime] = utc_now,
        activity: Optional[ActivityRecorder] = None,
    ):
        """Initialize handler with the store."""
        self.store = store
        self.clock = clock
        self.activity = activity or ActivityRecorder(store, clock)

    async def handle(self, command: PruneLogsCommand) -> int:
        """
        Handle log pruning.

        Returns:
            Number of activity and usage entries removed
        """
        if command.older_than_days < 0:
            raise InvalidKeyParametersError("Retention must not be negative")

        cutoff = self.clock() - timedelta(days=command.older_than_days)
        cleared = await self.store.prune_logs(cutoff)
        await self.activity.record(f"Cleared {cleared} old logs", ActivityType.INFO)
        logger.info("Pruned %d log entries older than %s", cleared, cutoff.isoformat())
        return cleared
