"""
JSON document implementation of the KeyStore port.

This adapter keeps the whole store (settings, keys, activity log,
revenue) in one JSON document and converts between that document
and domain entities.
"""
import logging
from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Dict, List, Optional

from asgiref.sync import sync_to_async
from django.utils.dateparse import parse_datetime

from access_keys.domain.key_record import (
    ActivityLogEntry,
    KeyRecord,
    UsageEntry,
    generate_key_id,
)
from access_keys.domain.store_settings import StoreSettings
from access_keys.ports.document_backend import DocumentBackend
from access_keys.ports.key_store import KeyStore
from core.domain.exceptions import DuplicateKeyCodeError, StoreUnavailableError
from core.domain.value_objects import ActivityType, KeyStatus
from core.infrastructure.locks import KeyLockArena, ThreadSafeAsyncLock

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"
ACTIVITY_LOG_LIMIT = 100


def _format_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = parse_datetime(str(value))
        if parsed is None:
            raise ValueError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JsonDocumentKeyStore(KeyStore):
    """
    Document-backed implementation of KeyStore.

    This adapter:
    1. Loads the document once, lazily, on first access
    2. Converts document entries to domain entities and back
    3. Flushes the full document through the backend on every write
    4. Owns the per-key lock arena shared by every service using it
    """

    def __init__(
        self,
        backend: DocumentBackend,
        default_settings: Optional[StoreSettings] = None,
        activity_limit: int = ACTIVITY_LOG_LIMIT,
    ):
        """
        Initialize the store.

        Args:
            backend: Persistence collaborator for the document
            default_settings: Settings used when the document is created
            activity_limit: Number of activity entries retained
        """
        self._backend = backend
        self._default_settings = default_settings or StoreSettings()
        self._activity_limit = activity_limit
        self._locks = KeyLockArena()
        self._write_lock = ThreadSafeAsyncLock()
        self._loaded = False
        self._closed = False

        self._version = DOCUMENT_VERSION
        self._created_at: Optional[datetime] = None
        self._settings = self._default_settings
        self._settings_extra: Dict[str, Any] = {}
        self._records: List[KeyRecord] = []
        self._activity: List[ActivityLogEntry] = []
        self._revenue = 0.0

    # Conversion

    def _record_to_document(self, record: KeyRecord) -> Dict[str, Any]:
        return {
            "id": record.id,
            "key": record.code,
            "created_at": _format_datetime(record.created_at),
            "expires_at": _format_datetime(record.expires_at),
            "duration_days": record.duration_days,
            "uses_remaining": record.uses_remaining,
            "total_uses": record.total_uses,
            "status": record.status.value,
            "price": record.price,
            "customer_name": record.customer_name,
            "customer_email": record.customer_email,
            "notes": record.notes,
            "created_by": record.created_by,
            "usage_logs": [
                {
                    "used_at": _format_datetime(entry.used_at),
                    "ip": entry.client_address,
                    "user_agent": entry.client_agent,
                }
                for entry in record.usage_log
            ],
        }

    def _record_to_domain(self, data: Dict[str, Any]) -> KeyRecord:
        return KeyRecord(
            id=data.get("id") or generate_key_id(),
            code=data["key"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data["expires_at"]),
            duration_days=int(data.get("duration_days", 0)),
            uses_remaining=int(data.get("uses_remaining", 0)),
            total_uses=int(data.get("total_uses", 0)),
            status=KeyStatus(data.get("status", KeyStatus.ACTIVE.value)),
            price=float(data.get("price") or 0),
            customer_name=data.get("customer_name") or "",
            customer_email=data.get("customer_email") or "",
            notes=data.get("notes") or "",
            created_by=data.get("created_by") or "admin",
            usage_log=tuple(
                UsageEntry(
                    used_at=_parse_datetime(entry["used_at"]),
                    client_address=entry.get("ip", "unknown"),
                    client_agent=entry.get("user_agent", "unknown"),
                )
                for entry in data.get("usage_logs") or []
            ),
        )

    def _to_document(
        self,
        records: List[KeyRecord],
        activity: List[ActivityLogEntry],
        settings: StoreSettings,
        revenue: float,
    ) -> Dict[str, Any]:
        return {
            "version": self._version,
            "settings": {
                **self._settings_extra,
                "redirect_url": settings.redirect_url,
                "auto_expire": settings.auto_expire,
                "enable_logging": settings.enable_logging,
                "admin_password": settings.admin_password,
            },
            "keys": [self._record_to_document(r) for r in records],
            "activity_logs": [
                {
                    "timestamp": _format_datetime(e.timestamp),
                    "message": e.message,
                    "type": e.type.value,
                }
                for e in activity
            ],
            "revenue": revenue,
            "created_at": _format_datetime(self._created_at),
        }

    def _from_document(self, document: Dict[str, Any]) -> None:
        settings_data = dict(document.get("settings") or {})
        known = {
            name: settings_data.pop(name)
            for name in ("redirect_url", "auto_expire", "enable_logging", "admin_password")
            if name in settings_data
        }
        self._settings_extra = settings_data
        self._settings = self._default_settings.update(**known)
        self._version = document.get("version", DOCUMENT_VERSION)
        self._created_at = _parse_datetime(
            document.get("created_at") or datetime.now(timezone.utc)
        )
        self._records = [self._record_to_domain(k) for k in document.get("keys") or []]
        self._activity = [
            ActivityLogEntry(
                timestamp=_parse_datetime(e["timestamp"]),
                message=e.get("message", ""),
                type=ActivityType(e.get("type", ActivityType.INFO.value)),
            )
            for e in document.get("activity_logs") or []
        ]
        self._revenue = float(document.get("revenue") or 0)

    # Persistence

    async def _ensure_loaded(self) -> None:
        if self._closed:
            raise StoreUnavailableError("Key store is closed")
        if self._loaded:
            return
        async with self._write_lock:
            if self._loaded:
                return
            try:
                document = await sync_to_async(self._backend.load)()
                if document is None:
                    self._created_at = datetime.now(timezone.utc)
                    await sync_to_async(self._backend.save)(
                        self._to_document([], [], self._settings, 0.0)
                    )
                    logger.info("Created new key database")
                else:
                    self._from_document(document)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error("Failed to load key database: %s", e, exc_info=True)
                raise StoreUnavailableError(f"Key database could not be loaded: {e}") from e
            self._loaded = True

    async def _commit(
        self,
        records: Optional[List[KeyRecord]] = None,
        activity: Optional[List[ActivityLogEntry]] = None,
        settings: Optional[StoreSettings] = None,
        revenue: Optional[float] = None,
    ) -> None:
        """
        Persist a new state, then adopt it in memory.

        Must be called with the write lock held. In-memory state only
        changes once the backend accepted the document.
        """
        records = self._records if records is None else records
        activity = self._activity if activity is None else activity
        settings = self._settings if settings is None else settings
        revenue = self._revenue if revenue is None else revenue
        document = self._to_document(records, activity, settings, revenue)
        try:
            await sync_to_async(self._backend.save)(document)
        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to save key database: %s", e, exc_info=True)
            raise StoreUnavailableError(f"Key database could not be saved: {e}") from e
        self._records = records
        self._activity = activity
        self._settings = settings
        self._revenue = revenue

    def _find_index(self, key_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == key_id:
                return index
        return None

    # KeyStore

    async def get(self, code: str) -> Optional[KeyRecord]:
        await self._ensure_loaded()
        for record in self._records:
            if record.code == code:
                return record
        return None

    async def get_by_id(self, key_id: str) -> Optional[KeyRecord]:
        await self._ensure_loaded()
        index = self._find_index(key_id)
        return None if index is None else self._records[index]

    async def put(self, record: KeyRecord) -> KeyRecord:
        await self._ensure_loaded()
        async with self._write_lock:
            for existing in self._records:
                if existing.code == record.code and existing.id != record.id:
                    raise DuplicateKeyCodeError(f"Key code {record.code} already exists")
            records = list(self._records)
            index = self._find_index(record.id)
            if index is None:
                records.insert(0, record)
            else:
                records[index] = record
            await self._commit(records=records)
        return record

    async def delete(self, key_id: str) -> bool:
        await self._ensure_loaded()
        async with self._write_lock:
            index = self._find_index(key_id)
            if index is None:
                return False
            records = list(self._records)
            del records[index]
            await self._commit(records=records)
        return True

    async def record_use(
        self, record: KeyRecord, activity: Optional[ActivityLogEntry] = None
    ) -> KeyRecord:
        await self._ensure_loaded()
        async with self._write_lock:
            index = self._find_index(record.id)
            if index is None:
                raise StoreUnavailableError(f"Key {record.code} vanished while recording usage")
            records = list(self._records)
            records[index] = record
            entries = self._bounded_activity(activity) if activity is not None else None
            await self._commit(records=records, activity=entries)
        return record

    def _bounded_activity(self, entry: ActivityLogEntry) -> List[ActivityLogEntry]:
        return (self._activity + [entry])[-self._activity_limit:]

    async def append_activity(self, entry: ActivityLogEntry) -> None:
        await self._ensure_loaded()
        async with self._write_lock:
            await self._commit(activity=self._bounded_activity(entry))

    async def list_all(self) -> List[KeyRecord]:
        await self._ensure_loaded()
        return list(self._records)

    async def list_activity(self) -> List[ActivityLogEntry]:
        await self._ensure_loaded()
        return list(self._activity)

    async def settings(self) -> StoreSettings:
        await self._ensure_loaded()
        return self._settings

    async def update_settings(self, **changes) -> StoreSettings:
        await self._ensure_loaded()
        async with self._write_lock:
            settings = self._settings.update(**changes)
            await self._commit(settings=settings)
        return settings

    async def add_revenue(self, amount: float) -> float:
        await self._ensure_loaded()
        async with self._write_lock:
            revenue = round(self._revenue + amount, 2)
            await self._commit(revenue=revenue)
        return revenue

    async def revenue(self) -> float:
        await self._ensure_loaded()
        return self._revenue

    async def prune_logs(self, before: datetime) -> int:
        await self._ensure_loaded()
        async with self._write_lock:
            activity = [e for e in self._activity if e.timestamp > before]
            removed = len(self._activity) - len(activity)
            records = []
            for record in self._records:
                pruned = record.prune_usage(before)
                removed += len(record.usage_log) - len(pruned.usage_log)
                records.append(pruned)
            if removed:
                await self._commit(records=records, activity=activity)
        return removed

    def lock(self, code: str) -> AsyncContextManager:
        return self._locks.hold(code)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.info("Key store closed")
