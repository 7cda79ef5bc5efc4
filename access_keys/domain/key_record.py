"""
KeyRecord domain entity.

This is the core domain entity representing an access key.
It contains business logic and is independent of infrastructure.
"""
import secrets
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from core.domain.value_objects import ActivityType, KeyStatus

KEY_CODE_PREFIX = "GLB"
KEY_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_key_code(prefix: str = KEY_CODE_PREFIX) -> str:
    """
    Generate a key code in format: PREFIX-XXXX-XXXX-XXXX.

    Ambiguous characters (I, O, 0, 1) are left out of the alphabet.

    Args:
        prefix: Code prefix

    Returns:
        Generated key code
    """
    parts = [
        "".join(secrets.choice(KEY_CODE_ALPHABET) for _ in range(4)) for _ in range(3)
    ]
    return f"{prefix}-{'-'.join(parts)}"


def generate_key_id() -> str:
    """Generate an opaque record identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class UsageEntry:
    """One successful consuming validation."""

    used_at: datetime
    client_address: str = "unknown"
    client_agent: str = "unknown"


@dataclass(frozen=True)
class ActivityLogEntry:
    """Store-wide activity log entry."""

    timestamp: datetime
    message: str
    type: ActivityType = ActivityType.INFO


@dataclass(frozen=True)
class KeyRecord:
    """
    KeyRecord domain entity.

    Represents a time- and usage-limited access key.
    This is an immutable value object; every transition returns a new record.
    """

    id: str
    code: str
    created_at: datetime
    expires_at: datetime
    duration_days: int
    uses_remaining: int
    total_uses: int
    status: KeyStatus = KeyStatus.ACTIVE
    price: float = 0.0
    customer_name: str = ""
    customer_email: str = ""
    notes: str = ""
    created_by: str = "admin"
    usage_log: Tuple[UsageEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate key record."""
        if not self.id:
            raise ValueError("Key ID is required")
        if not self.code or len(self.code.strip()) == 0:
            raise ValueError("Key code cannot be empty")
        if self.uses_remaining < 0 or self.total_uses < 0:
            raise ValueError("Use counters cannot be negative")
        if self.uses_remaining > self.total_uses:
            raise ValueError("Uses remaining cannot exceed total uses")

    @classmethod
    def create(
        cls,
        duration_days: int,
        uses_limit: int,
        price: float = 0.0,
        customer_name: str = "",
        customer_email: str = "",
        notes: str = "",
        code: Optional[str] = None,
        key_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "KeyRecord":
        """
        Create a new active KeyRecord.

        Args:
            duration_days: Validity period in days
            uses_limit: Number of consuming validations allowed
            price: Sale price
            customer_name: Customer name
            customer_email: Customer email
            notes: Free-form notes
            code: Optional key code (generated if not provided)
            key_id: Optional identifier (generated if not provided)
            now: Creation time (defaults to current UTC time)

        Returns:
            KeyRecord entity instance
        """
        created_at = now or datetime.now(timezone.utc)
        return cls(
            id=key_id or generate_key_id(),
            code=code or generate_key_code(),
            created_at=created_at,
            expires_at=created_at + timedelta(days=duration_days),
            duration_days=duration_days,
            uses_remaining=uses_limit,
            total_uses=uses_limit,
            status=KeyStatus.ACTIVE,
            price=price,
            customer_name=customer_name,
            customer_email=customer_email,
            notes=notes,
        )

    @property
    def uses_consumed(self) -> int:
        """Number of uses already consumed."""
        return self.total_uses - self.uses_remaining

    @property
    def is_exhausted(self) -> bool:
        """Derived exhaustion condition."""
        return self.uses_remaining <= 0

    def is_overdue(self, now: datetime) -> bool:
        """Check whether the expiry time has passed."""
        return now > self.expires_at

    def consume(self) -> "KeyRecord":
        """
        Create a new KeyRecord with one use consumed.

        Returns:
            New KeyRecord with uses_remaining decremented
        """
        if self.uses_remaining <= 0:
            raise ValueError("Cannot consume an exhausted key")
        return replace(self, uses_remaining=self.uses_remaining - 1)

    def with_usage(self, entry: UsageEntry) -> "KeyRecord":
        """Create a new KeyRecord with a usage entry appended."""
        return replace(self, usage_log=self.usage_log + (entry,))

    def revoke(self) -> "KeyRecord":
        """Create a new KeyRecord with revoked status."""
        return replace(self, status=KeyStatus.REVOKED)

    def reactivate(self) -> "KeyRecord":
        """Create a new KeyRecord with active status."""
        return replace(self, status=KeyStatus.ACTIVE)

    def mark_expired(self) -> "KeyRecord":
        """Create a new KeyRecord with expired status."""
        return replace(self, status=KeyStatus.EXPIRED)

    def prune_usage(self, before: datetime) -> "KeyRecord":
        """Create a new KeyRecord without usage entries older than ``before``."""
        return replace(
            self, usage_log=tuple(e for e in self.usage_log if e.used_at > before)
        )
