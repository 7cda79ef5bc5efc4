"""
Validation service.

Consuming validation and non-consuming status checks against a
KeyStore. Both the authority (HTTP API) and the client mirror run
this same service.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from access_keys.application.dto.key_dto import KeyDataDTO, StatusResult, ValidationResult
from access_keys.application.services.activity_recorder import ActivityRecorder, utc_now
from access_keys.domain.key_record import KeyRecord, UsageEntry
from access_keys.domain.lifecycle import days_remaining, evaluate
from access_keys.domain.services import outcome_message
from access_keys.ports.key_store import KeyStore
from core.domain.value_objects import ActivityType, KeyCode
from core.instrumentation import get_tracer
from core.metrics import key_status_checks_total, key_validations_total, keys_expired_total

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class ValidationService:
    """
    Service for validating access keys.

    Every consuming validation runs inside the key's critical section,
    so concurrent validations of the same code are serialized while
    different codes proceed in parallel.
    """

    def __init__(
        self,
        store: KeyStore,
        clock: Callable[[], datetime] = utc_now,
        activity: Optional[ActivityRecorder] = None,
    ):
        """
        Initialize service.

        Args:
            store: Key store
            clock: Callable returning the current aware time
            activity: Activity recorder (built over the store if omitted)
        """
        self.store = store
        self.clock = clock
        self.activity = activity or ActivityRecorder(store, clock)

    async def _apply_transition(self, transition: Optional[KeyRecord]) -> None:
        if transition is None:
            return
        await self.store.put(transition)
        keys_expired_total.labels(trigger="lazy").inc()
        logger.info("Key %s expired on access", transition.code)
        await self.activity.record(f"Key expired: {transition.code}", ActivityType.WARNING)

    async def validate(
        self,
        code: str,
        client_address: str = "unknown",
        client_agent: str = "unknown",
    ) -> ValidationResult:
        """
        Validate a key and consume one use on success.

        Args:
            code: Key code
            client_address: Caller address recorded in the usage log
            client_agent: Caller user agent recorded in the usage log

        Returns:
            ValidationResult

        Raises:
            StoreUnavailableError: If the store cannot be read or written
        """
        with tracer.start_as_current_span("validate_key") as span:
            span.set_attribute("key.code", KeyCode.masked(code))

            async with self.store.lock(code):
                now = self.clock()
                settings = await self.store.settings()
                record = await self.store.get(code)
                evaluation = evaluate(record, now, settings.auto_expire)
                await self._apply_transition(evaluation.transition)

                outcome = evaluation.outcome
                if not evaluation.is_valid:
                    key_validations_total.labels(outcome=outcome.status.value).inc()
                    span.set_attribute("key.outcome", outcome.status.value)
                    logger.info("Validation refused for %s: %s", code, outcome.status.value)
                    return ValidationResult(
                        valid=False,
                        message=outcome_message(outcome),
                        status=outcome.status,
                    )

                consumed = record.consume().with_usage(
                    UsageEntry(
                        used_at=now,
                        client_address=client_address or "unknown",
                        client_agent=client_agent or "unknown",
                    )
                )
                entry = await self.activity.entry(
                    f"Key used: {code} (IP: {client_address or 'unknown'})",
                    ActivityType.INFO,
                )
                consumed = await self.store.record_use(consumed, entry)

            key_validations_total.labels(outcome=outcome.status.value).inc()
            span.set_attribute("key.outcome", outcome.status.value)
            return ValidationResult(
                valid=True,
                message=outcome_message(outcome),
                status=outcome.status,
                key_data=KeyDataDTO(
                    key=consumed.code,
                    expires_at=consumed.expires_at,
                    days_remaining=outcome.days_remaining,
                    uses_remaining=consumed.uses_remaining,
                    total_uses=consumed.total_uses,
                    duration_days=consumed.duration_days,
                    customer_name=consumed.customer_name,
                    customer_email=consumed.customer_email,
                ),
            )

    async def check_status(self, code: str) -> StatusResult:
        """
        Report a key's status without consuming a use.

        The lazy expiry transition is persisted when due; the reported
        status is the stored status after that transition.

        Args:
            code: Key code

        Returns:
            StatusResult (``found`` is False for unknown codes)

        Raises:
            StoreUnavailableError: If the store cannot be read or written
        """
        with tracer.start_as_current_span("check_key_status") as span:
            span.set_attribute("key.code", KeyCode.masked(code))

            async with self.store.lock(code):
                now = self.clock()
                settings = await self.store.settings()
                record = await self.store.get(code)
                if record is None:
                    key_status_checks_total.labels(found="false").inc()
                    return StatusResult(found=False)

                evaluation = evaluate(record, now, settings.auto_expire)
                await self._apply_transition(evaluation.transition)
                record = evaluation.transition or record

            key_status_checks_total.labels(found="true").inc()
            return StatusResult(
                found=True,
                status=record.status.value,
                expires_at=record.expires_at,
                days_remaining=days_remaining(record, now),
                uses_remaining=record.uses_remaining,
                total_uses=record.total_uses,
            )
