"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
import re
from abc import ABC
from dataclasses import dataclass
from enum import Enum

KEY_CODE_PATTERN = re.compile(r"^[A-Z0-9-]{4,20}$")


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class KeyCode(ValueObject):
    """
    Key code value object.

    A key code is what the user types in: 4 to 20 characters drawn
    from uppercase letters, digits and dashes.
    """

    value: str

    def __post_init__(self):
        """Validate key code format."""
        if not self.is_well_formed(self.value):
            raise ValueError(f"Invalid key code format: {self.value!r}")

    @staticmethod
    def normalize(raw: str) -> str:
        """Strip surrounding whitespace and upper-case user input."""
        return (raw or "").strip().upper()

    @staticmethod
    def is_well_formed(value: str) -> bool:
        """Check a (normalized) code against the accepted pattern."""
        return bool(value) and KEY_CODE_PATTERN.match(value) is not None

    @staticmethod
    def masked(value: str) -> str:
        """Code with all but the last four characters hidden, for telemetry."""
        value = value or ""
        if len(value) <= 4:
            return "*" * len(value)
        return "*" * (len(value) - 4) + value[-4:]

    def __str__(self) -> str:
        """Return code as string."""
        return self.value


class KeyStatus(Enum):
    """Stored key status. Exhaustion is derived and never stored."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class ValidationStatus(Enum):
    """Status reported to callers of validate."""

    ACTIVE = "active"
    INVALID = "invalid"
    EXPIRED = "expired"
    REVOKED = "revoked"
    EXHAUSTED = "exhausted"
    ERROR = "error"
    # Client-local only, never produced by the service.
    INVALID_FORMAT = "invalid_format"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class ActivityType(Enum):
    """Activity log entry type."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        """Return type as string."""
        return self.value
