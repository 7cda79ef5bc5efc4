"""
Client key agent.

Gatekeeper for a client application: keeps one access key, validates
it on start and on submit, revalidates it periodically and refreshes
its display data from non-consuming status checks.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from access_keys.application.dto.key_dto import KeyDataDTO, StatusResult, ValidationResult
from client_agent.credentials import CredentialCache, MemoryCredentialCache
from client_agent.mirror import LocalKeyMirror
from client_agent.scheduler import PeriodicTask
from client_agent.transport import KeyServiceTransport
from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import KeyCode, ValidationStatus
from core.metrics import degraded_validations_total

logger = logging.getLogger(__name__)

VALIDATION_INTERVAL = 300.0
STATUS_CHECK_INTERVAL = 60.0
REQUEST_TIMEOUT = 10.0

DEFAULT_SETTINGS = {
    "redirect_url": "https://your-site.com/purchase",
    "auto_expire": True,
    "enable_logging": True,
}


class AgentState(Enum):
    """Agent state."""

    NO_KEY = "no_key"
    VALIDATING = "validating"
    KEY_ACTIVE = "key_active"
    KEY_REJECTED = "key_rejected"


class ClientKeyAgent:
    """
    Client-side key agent.

    Usage:
        agent = ClientKeyAgent(HttpKeyServiceTransport(url), on_rejected=show_expired)
        result = await agent.start()
        if result is None:
            result = await agent.submit(user_input)
        ...
        await agent.stop()

    Every consuming validation (start, submit, revalidation) costs one
    use at the key service, so restarting the client consumes a use.
    """

    def __init__(
        self,
        transport: KeyServiceTransport,
        mirror: Optional[LocalKeyMirror] = None,
        credentials: Optional[CredentialCache] = None,
        validation_interval: float = VALIDATION_INTERVAL,
        status_interval: float = STATUS_CHECK_INTERVAL,
        request_timeout: float = REQUEST_TIMEOUT,
        on_rejected: Optional[Callable[[ValidationResult], None]] = None,
    ):
        """
        Initialize the agent.

        Args:
            transport: Transport to the key service
            mirror: Local mirror used in degraded mode
            credentials: Cache for the current key code
            validation_interval: Seconds between consuming revalidations
            status_interval: Seconds between status refreshes
            request_timeout: Seconds before a service call counts as failed
            on_rejected: Called with the result when an accepted key is rejected
        """
        self.transport = transport
        self.mirror = mirror or LocalKeyMirror()
        self.credentials = credentials or MemoryCredentialCache()
        self.request_timeout = request_timeout
        self.on_rejected = on_rejected

        self.state = AgentState.NO_KEY
        self.current_key: Optional[str] = None
        self.key_data: Optional[Dict[str, Any]] = None
        self.degraded = False
        self.last_rejection: Optional[ValidationResult] = None

        self._generation = 0
        self._validation_timer = PeriodicTask(
            validation_interval, self.revalidate, "key-revalidation"
        )
        self._status_timer = PeriodicTask(status_interval, self.refresh_status, "key-status")

    @property
    def timers_running(self) -> bool:
        return self._validation_timer.running or self._status_timer.running

    # Service calls with mirror fallback

    async def _validate(self, code: str) -> ValidationResult:
        try:
            result = await asyncio.wait_for(self.transport.validate(code), self.request_timeout)
        except (StoreUnavailableError, asyncio.TimeoutError) as e:
            logger.warning("Key service unavailable, validating %s locally: %s", code, e)
            degraded_validations_total.labels(operation="validate").inc()
            self.degraded = True
            try:
                return await self.mirror.validate(code)
            except StoreUnavailableError as mirror_error:
                logger.error("Local mirror unavailable: %s", mirror_error)
                return ValidationResult(
                    valid=False,
                    message="Validation error",
                    status=ValidationStatus.ERROR,
                    degraded=True,
                )

        self.degraded = False
        if result.valid and result.key_data is not None:
            await self._mirror_accepted(result.key_data)
        return result

    async def _mirror_accepted(self, key_data: KeyDataDTO) -> None:
        try:
            await self.mirror.adopt(key_data)
        except (StoreUnavailableError, ValueError) as e:
            logger.warning("Failed to mirror key %s locally: %s", key_data.key, e)

    async def _check_status(self, code: str) -> StatusResult:
        try:
            result = await asyncio.wait_for(
                self.transport.check_status(code), self.request_timeout
            )
        except (StoreUnavailableError, asyncio.TimeoutError) as e:
            logger.warning("Key service unavailable, checking %s locally: %s", code, e)
            degraded_validations_total.labels(operation="status").inc()
            self.degraded = True
            try:
                return await self.mirror.check_status(code)
            except StoreUnavailableError as mirror_error:
                logger.error("Local mirror unavailable: %s", mirror_error)
                return StatusResult(found=False, degraded=True)
        self.degraded = False
        return result

    # State changes

    def _start_timers(self) -> None:
        self._validation_timer.start()
        self._status_timer.start()

    def _cancel_timers(self) -> None:
        self._validation_timer.cancel()
        self._status_timer.cancel()

    def _activate(self, code: str, result: ValidationResult) -> None:
        self.credentials.save(code)
        self.current_key = code
        self.key_data = result.key_data.to_dict() if result.key_data else None
        self.last_rejection = None
        self.state = AgentState.KEY_ACTIVE
        self._start_timers()
        logger.info("Key %s accepted%s", code, " (degraded)" if result.degraded else "")

    def _clear(self) -> None:
        self._generation += 1
        self._cancel_timers()
        self.credentials.clear()
        self.current_key = None
        self.key_data = None

    def _reject(self, result: ValidationResult) -> None:
        self._clear()
        self.last_rejection = result
        self.state = AgentState.KEY_REJECTED
        logger.info("Key rejected: %s", result.message)
        if self.on_rejected is not None:
            self.on_rejected(result)
        self.state = AgentState.NO_KEY

    # Public API

    async def start(self) -> Optional[ValidationResult]:
        """
        Validate the cached key, if any.

        Returns:
            The validation result, or None when no key is cached
        """
        code = self.credentials.load()
        if not code:
            self.state = AgentState.NO_KEY
            return None

        code = KeyCode.normalize(code)
        if not KeyCode.is_well_formed(code):
            self.credentials.clear()
            self.state = AgentState.NO_KEY
            return self._format_error()

        self.state = AgentState.VALIDATING
        generation = self._generation
        result = await self._validate(code)
        if generation != self._generation:
            return result

        if result.valid:
            self._activate(code, result)
        else:
            self._reject(result)
        return result

    async def submit(self, raw_code: str) -> ValidationResult:
        """
        Validate a key entered by the user and adopt it on success.

        Input is stripped and upper-cased; malformed input is refused
        without contacting the service or the mirror.

        Args:
            raw_code: Key as typed

        Returns:
            ValidationResult
        """
        code = KeyCode.normalize(raw_code or "")
        if not code:
            return ValidationResult(
                valid=False,
                message="Please enter an access key",
                status=ValidationStatus.INVALID_FORMAT,
            )
        if not KeyCode.is_well_formed(code):
            return self._format_error()

        self._clear()
        self.state = AgentState.VALIDATING
        generation = self._generation
        result = await self._validate(code)
        if generation != self._generation:
            return result

        if result.valid:
            self._activate(code, result)
        else:
            self.state = AgentState.NO_KEY
            self.last_rejection = result
        return result

    async def revalidate(self) -> Optional[ValidationResult]:
        """
        Consuming revalidation of the current key (timer callback).

        Any non-valid result evicts the key.
        """
        code = self.current_key
        if code is None:
            return None

        generation = self._generation
        result = await self._validate(code)
        if generation != self._generation:
            logger.debug("Discarding revalidation result from a finished session")
            return None

        if result.valid:
            if result.key_data is not None:
                self.key_data = result.key_data.to_dict()
        else:
            self._reject(result)
        return result

    async def refresh_status(self) -> Optional[StatusResult]:
        """
        Refresh display data from a non-consuming status check (timer callback).

        Never changes whether the key is accepted.
        """
        code = self.current_key
        if code is None:
            return None

        generation = self._generation
        status = await self._check_status(code)
        if generation != self._generation:
            return None

        if status.found:
            self.key_data = {
                **(self.key_data or {}),
                "days_remaining": status.days_remaining,
                "uses_remaining": status.uses_remaining,
                "status": status.status,
            }
        return status

    async def fetch_settings(self) -> Dict[str, Any]:
        """Client-visible settings, with defaults when the service is unreachable."""
        try:
            return await asyncio.wait_for(self.transport.fetch_settings(), self.request_timeout)
        except (StoreUnavailableError, asyncio.TimeoutError) as e:
            logger.warning("Settings fetch failed, using defaults: %s", e)
            return dict(DEFAULT_SETTINGS)

    def logout(self) -> None:
        """Forget the key and stop both timers. In-flight ticks are discarded."""
        self._clear()
        self.state = AgentState.NO_KEY
        logger.info("Logged out")

    async def stop(self) -> None:
        """Stop both timers and wait for them to finish."""
        await self._validation_timer.stop()
        await self._status_timer.stop()

    def _format_error(self) -> ValidationResult:
        return ValidationResult(
            valid=False,
            message="Invalid key format. Use format: XXXX-XXXX-XXXX",
            status=ValidationStatus.INVALID_FORMAT,
        )
