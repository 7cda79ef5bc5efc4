"""
Key service transport.

Talks to the key service HTTP API and turns its JSON answers into
the same result objects the local ValidationService produces.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from asgiref.sync import sync_to_async
from django.utils.dateparse import parse_datetime

from access_keys.application.dto.key_dto import KeyDataDTO, StatusResult, ValidationResult
from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import ValidationStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class KeyServiceTransport(ABC):
    """Port for reaching the authoritative key service."""

    @abstractmethod
    async def validate(self, code: str) -> ValidationResult:
        """
        Consuming validation.

        Raises:
            StoreUnavailableError: If the service cannot give an answer
        """
        pass

    @abstractmethod
    async def check_status(self, code: str) -> StatusResult:
        """
        Non-consuming status check.

        Raises:
            StoreUnavailableError: If the service cannot give an answer
        """
        pass

    @abstractmethod
    async def fetch_settings(self) -> Dict[str, Any]:
        """
        Client-visible settings.

        Raises:
            StoreUnavailableError: If the service cannot give an answer
        """
        pass


def _parse_timestamp(value: Optional[str]):
    if not value:
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise StoreUnavailableError(f"Malformed timestamp from key service: {value!r}")
    return parsed


def parse_validation_result(data: Dict[str, Any]) -> ValidationResult:
    """
    Build a ValidationResult from the validate endpoint's JSON.

    Raises:
        StoreUnavailableError: On ``status: "error"`` or a malformed body
    """
    try:
        status = ValidationStatus(data["status"])
    except (KeyError, ValueError) as e:
        raise StoreUnavailableError(f"Malformed validation response: {data!r}") from e
    if status == ValidationStatus.ERROR:
        raise StoreUnavailableError(data.get("message") or "Key service reported an error")

    key_data = None
    raw = data.get("key_data")
    if data.get("valid") and raw:
        try:
            key_data = KeyDataDTO(
                key=raw["key"],
                expires_at=_parse_timestamp(raw["expires_at"]),
                days_remaining=int(raw["days_remaining"]),
                uses_remaining=int(raw["uses_remaining"]),
                total_uses=int(raw["total_uses"]),
                duration_days=int(raw["duration_days"]),
                customer_name=raw.get("customer_name") or "",
                customer_email=raw.get("customer_email") or "",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise StoreUnavailableError(f"Malformed key data: {raw!r}") from e

    return ValidationResult(
        valid=bool(data.get("valid")),
        message=data.get("message", ""),
        status=status,
        key_data=key_data,
    )


def parse_status_result(data: Dict[str, Any]) -> StatusResult:
    """Build a StatusResult from the status endpoint's JSON."""
    if not data.get("found"):
        return StatusResult(found=False)
    return StatusResult(
        found=True,
        status=data.get("status"),
        expires_at=_parse_timestamp(data.get("expires_at")),
        days_remaining=data.get("days_remaining"),
        uses_remaining=data.get("uses_remaining"),
        total_uses=data.get("total_uses"),
    )


class HttpKeyServiceTransport(KeyServiceTransport):
    """
    HTTP transport using requests.

    Blocking calls run in a worker thread. Connection errors, timeouts,
    non-2xx answers and undecodable bodies all raise
    StoreUnavailableError so the agent can switch to its mirror.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        user_agent: str = "global-key-client/1.0",
    ):
        """
        Initialize transport.

        Args:
            base_url: API root, e.g. ``https://keys.example.com/api/v1``
            timeout: Per-request timeout in seconds
            session: Optional requests session
            user_agent: User-Agent header recorded in usage logs
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning("Key service timed out: %s %s", method, url)
            raise StoreUnavailableError(f"Key service timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.warning("Key service unreachable: %s", e)
            raise StoreUnavailableError(f"Key service unreachable: {e}") from e

        if not response.ok:
            logger.warning("Key service answered HTTP %s for %s", response.status_code, url)
            raise StoreUnavailableError(f"Key service returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailableError("Key service returned a non-JSON body") from e

    async def _call(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None):
        return await sync_to_async(self._request, thread_sensitive=False)(method, path, payload)

    async def validate(self, code: str) -> ValidationResult:
        return parse_validation_result(await self._call("POST", "validate", {"key": code}))

    async def check_status(self, code: str) -> StatusResult:
        return parse_status_result(await self._call("POST", "status", {"key": code}))

    async def fetch_settings(self) -> Dict[str, Any]:
        return await self._call("GET", "settings")

    def close(self) -> None:
        self.session.close()
