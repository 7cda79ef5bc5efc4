"""
Access key DTOs for API responses and client results.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain.exceptions import (
    InvalidKeyFormatError,
    KeyExhaustedError,
    KeyExpiredError,
    KeyNotFoundError,
    KeyRevokedError,
    StoreUnavailableError,
)
from core.domain.value_objects import ValidationStatus

_STATUS_ERRORS = {
    ValidationStatus.INVALID: KeyNotFoundError,
    ValidationStatus.REVOKED: KeyRevokedError,
    ValidationStatus.EXPIRED: KeyExpiredError,
    ValidationStatus.EXHAUSTED: KeyExhaustedError,
    ValidationStatus.ERROR: StoreUnavailableError,
    ValidationStatus.INVALID_FORMAT: InvalidKeyFormatError,
}


@dataclass
class KeyDataDTO:
    """Snapshot of a key returned on successful validation."""

    key: str
    expires_at: datetime
    days_remaining: int
    uses_remaining: int
    total_uses: int
    duration_days: int
    customer_name: str = ""
    customer_email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["expires_at"] = self.expires_at.isoformat()
        return data


@dataclass
class ValidationResult:
    """Result of a consuming validation."""

    valid: bool
    message: str
    status: ValidationStatus
    key_data: Optional[KeyDataDTO] = None
    degraded: bool = False

    def raise_for_status(self) -> None:
        """
        Raise the exception matching a failed validation.

        Raises:
            KeyException or StoreUnavailableError subclass for the status
        """
        if self.valid:
            return
        error_class = _STATUS_ERRORS.get(self.status)
        if error_class is None:
            raise StoreUnavailableError(self.message)
        raise error_class(self.message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "valid": self.valid,
            "message": self.message,
            "status": self.status.value,
        }
        if self.key_data is not None:
            data["key_data"] = self.key_data.to_dict()
        return data


@dataclass
class StatusResult:
    """Result of a non-consuming status check."""

    found: bool
    status: Optional[str] = None
    expires_at: Optional[datetime] = None
    days_remaining: Optional[int] = None
    uses_remaining: Optional[int] = None
    total_uses: Optional[int] = None
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if not self.found:
            return {"found": False}
        return {
            "found": True,
            "status": self.status,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "days_remaining": self.days_remaining,
            "uses_remaining": self.uses_remaining,
            "total_uses": self.total_uses,
        }


@dataclass
class KeyRecordDTO:
    """DTO for administrative key listings."""

    id: str
    key: str
    status: str
    created_at: datetime
    expires_at: datetime
    duration_days: int
    uses_remaining: int
    total_uses: int
    price: float
    customer_name: str
    customer_email: str
    notes: str
    usage_count: int


@dataclass
class StatsDTO:
    """DTO for store statistics."""

    total_keys: int
    active_keys: int
    expired_keys: int
    total_revenue: float
    total_uses: int


@dataclass
class ActivityLogDTO:
    """DTO for an activity log entry."""

    timestamp: datetime
    message: str
    type: str
