"""
Local key mirror.

A client-side copy of the key store used while the key service is
unreachable. It runs the same ValidationService as the authority,
so degraded answers follow the same rules. Every online acceptance
copies the authority's view of the key into the mirror; degraded
validations then decrement only the local copy, which can drift from
the authority until the next online acceptance.
"""
import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from access_keys.application.dto.key_dto import KeyDataDTO, StatusResult, ValidationResult
from access_keys.application.services.activity_recorder import utc_now
from access_keys.application.services.validation_service import ValidationService
from access_keys.domain.key_record import KeyRecord, generate_key_id
from access_keys.infrastructure.backends import InMemoryDocumentBackend
from access_keys.infrastructure.repositories.json_key_store import JsonDocumentKeyStore
from access_keys.ports.document_backend import DocumentBackend
from core.domain.value_objects import KeyStatus

logger = logging.getLogger(__name__)

FALLBACK_KEY_CODE = "DEMO-ABCD-1234-EFGH"
FALLBACK_KEY_DAYS = 30
FALLBACK_KEY_USES = 100


class LocalKeyMirror:
    """Client-side mirror of the key store."""

    def __init__(
        self,
        backend: Optional[DocumentBackend] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the mirror.

        Args:
            backend: Document backend (in-memory if omitted)
            clock: Callable returning the current aware time
        """
        self.clock = clock
        self.store = JsonDocumentKeyStore(backend or InMemoryDocumentBackend())
        self.service = ValidationService(self.store, clock)

    async def validate(self, code: str) -> ValidationResult:
        result = await self.service.validate(code)
        result.degraded = True
        return result

    async def check_status(self, code: str) -> StatusResult:
        result = await self.service.check_status(code)
        result.degraded = True
        return result

    async def adopt(self, key_data: KeyDataDTO) -> KeyRecord:
        """
        Copy the authority's view of an accepted key into the mirror.

        Counters, expiry and customer details are taken from the
        service's answer. A key already mirrored keeps its id and
        local usage log.

        Args:
            key_data: Key data from a successful online validation

        Returns:
            The mirrored record
        """
        async with self.store.lock(key_data.key):
            existing = await self.store.get(key_data.key)
            fields = dict(
                expires_at=key_data.expires_at,
                duration_days=key_data.duration_days,
                uses_remaining=key_data.uses_remaining,
                total_uses=key_data.total_uses,
                status=KeyStatus.ACTIVE,
                customer_name=key_data.customer_name,
                customer_email=key_data.customer_email,
            )
            if existing is None:
                record = KeyRecord(
                    id=generate_key_id(),
                    code=key_data.key,
                    created_at=key_data.expires_at - timedelta(days=key_data.duration_days),
                    **fields,
                )
                logger.info("Mirrored key %s locally", key_data.key)
            else:
                record = replace(existing, **fields)
            return await self.store.put(record)

    async def ensure_fallback(self) -> bool:
        """
        Seed the demo key into an empty mirror.

        Returns:
            True if the fallback key was created
        """
        if await self.store.list_all():
            return False
        record = KeyRecord.create(
            duration_days=FALLBACK_KEY_DAYS,
            uses_limit=FALLBACK_KEY_USES,
            customer_name="Demo User",
            notes="Offline fallback key",
            code=FALLBACK_KEY_CODE,
            now=self.clock(),
        )
        await self.store.put(record)
        logger.info("Seeded fallback key %s into local mirror", FALLBACK_KEY_CODE)
        return True

    def close(self) -> None:
        self.store.close()
