"""
Access key domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from access_keys.domain.key_record import KeyRecord
from access_keys.domain.lifecycle import Blocked, Exhausted, Invalid, Outcome, Valid
from access_keys.domain.store_settings import StoreSettings
from core.domain.exceptions import InvalidKeyParametersError, UnauthorizedError
from core.domain.value_objects import Email, KeyStatus

PRICE_PER_DAY = 3


class KeyIssuer:
    """Domain service for issuing new keys."""

    @staticmethod
    def default_price(duration_days: int) -> float:
        """Simple pricing: a flat rate per day."""
        return round(duration_days * PRICE_PER_DAY, 2)

    @staticmethod
    def issue(
        duration_days: int,
        uses_limit: int,
        code: str,
        now: datetime,
        price: Optional[float] = None,
        customer_name: str = "",
        customer_email: str = "",
        notes: str = "",
    ) -> KeyRecord:
        """
        Validate creation parameters and build a new active record.

        Raises:
            InvalidKeyParametersError: If duration, uses or price are rejected
        """
        if duration_days is None or duration_days <= 0:
            raise InvalidKeyParametersError("Duration must be a positive number of days")
        if uses_limit is None or uses_limit <= 0:
            raise InvalidKeyParametersError("Uses limit must be a positive number")
        if price is None:
            price = KeyIssuer.default_price(duration_days)
        if price < 0:
            raise InvalidKeyParametersError("Price cannot be negative")
        if customer_email:
            try:
                Email(customer_email)
            except ValueError as e:
                raise InvalidKeyParametersError(str(e)) from e

        return KeyRecord.create(
            duration_days=duration_days,
            uses_limit=uses_limit,
            price=float(price),
            customer_name=customer_name,
            customer_email=customer_email,
            notes=notes,
            code=code,
            now=now,
        )


class AdminAuthenticator:
    """Domain service for checking the administrative credential."""

    @staticmethod
    def is_valid(settings: StoreSettings, password: Optional[str]) -> bool:
        if not password:
            return False
        return secrets.compare_digest(settings.admin_password.encode(), password.encode())

    @staticmethod
    def verify(settings: StoreSettings, password: Optional[str]) -> None:
        """
        Raises:
            UnauthorizedError: If the credential is missing or wrong
        """
        if not AdminAuthenticator.is_valid(settings, password):
            raise UnauthorizedError()


def outcome_message(outcome: Outcome) -> str:
    """Human-readable message for an evaluation outcome."""
    if isinstance(outcome, Invalid):
        return "Key not found"
    if isinstance(outcome, Blocked):
        if outcome.reason == KeyStatus.EXPIRED:
            return "Key has expired"
        return f"Key is {outcome.reason.value}"
    if isinstance(outcome, Exhausted):
        return "No uses remaining"
    if isinstance(outcome, Valid):
        return "Access granted"
    return "Key is not valid"


@dataclass(frozen=True)
class KeyStatistics:
    """Aggregate figures over the whole store."""

    total_keys: int
    active_keys: int
    expired_keys: int
    total_revenue: float
    total_uses: int

    @classmethod
    def compute(cls, records: Iterable[KeyRecord], revenue: float) -> "KeyStatistics":
        records = list(records)
        return cls(
            total_keys=len(records),
            active_keys=sum(1 for r in records if r.status == KeyStatus.ACTIVE),
            expired_keys=sum(1 for r in records if r.status == KeyStatus.EXPIRED),
            total_revenue=revenue,
            total_uses=sum(r.uses_consumed for r in records),
        )
