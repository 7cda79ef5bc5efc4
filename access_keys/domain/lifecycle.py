"""
Key lifecycle state machine.

Pure functions: given a key record and the current time, decide
whether the key may be used and which state change (if any) must
be persisted as a consequence. Nothing here performs I/O or raises.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from access_keys.domain.key_record import KeyRecord
from core.domain.value_objects import KeyStatus, ValidationStatus

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Invalid:
    """No record exists for the code."""

    status = ValidationStatus.INVALID


@dataclass(frozen=True)
class Blocked:
    """Stored status is not active, or the key is past its expiry."""

    reason: KeyStatus

    @property
    def status(self) -> ValidationStatus:
        return ValidationStatus(self.reason.value)


@dataclass(frozen=True)
class Exhausted:
    """Active and unexpired, but no uses left."""

    status = ValidationStatus.EXHAUSTED


@dataclass(frozen=True)
class Valid:
    """Key may be used."""

    days_remaining: int
    uses_remaining: int
    status = ValidationStatus.ACTIVE


Outcome = Union[Invalid, Blocked, Exhausted, Valid]


@dataclass(frozen=True)
class Evaluation:
    """
    Result of evaluating a record.

    ``transition`` is the new record state the caller must persist,
    or None when nothing changed.
    """

    outcome: Outcome
    transition: Optional[KeyRecord] = None

    @property
    def is_valid(self) -> bool:
        return isinstance(self.outcome, Valid)


def days_remaining(record: KeyRecord, now: datetime) -> int:
    """
    Whole days left until expiry, rounded up.

    A key expiring in 30 minutes reports 1, an expired key reports
    zero or a negative number.
    """
    return math.ceil((record.expires_at - now) / ONE_DAY)


def evaluate(record: Optional[KeyRecord], now: datetime, auto_expire: bool = True) -> Evaluation:
    """
    Evaluate a key record at ``now``.

    Precedence: missing record, stored status, expiry, exhaustion.
    Expiry is checked before exhaustion so an expired and exhausted
    key reports ``expired``.

    Args:
        record: Record to evaluate (None when the code is unknown)
        now: Current time
        auto_expire: Whether an overdue active key transitions to expired

    Returns:
        Evaluation with the tagged outcome and an optional transition
    """
    if record is None:
        return Evaluation(Invalid())

    if record.status != KeyStatus.ACTIVE:
        return Evaluation(Blocked(record.status))

    if record.is_overdue(now):
        transition = record.mark_expired() if auto_expire else None
        return Evaluation(Blocked(KeyStatus.EXPIRED), transition)

    if record.is_exhausted:
        return Evaluation(Exhausted())

    return Evaluation(Valid(days_remaining(record, now), record.uses_remaining))


def overdue(records: Iterable[KeyRecord], now: datetime) -> List[KeyRecord]:
    """Active records whose expiry time has passed."""
    return [r for r in records if r.status == KeyStatus.ACTIVE and r.expires_at < now]
