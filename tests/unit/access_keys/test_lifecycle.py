"""
Unit tests for the key lifecycle state machine.
"""
from datetime import timedelta

from access_keys.domain.lifecycle import (
    Blocked,
    Exhausted,
    Invalid,
    Valid,
    days_remaining,
    evaluate,
    overdue,
)
from core.domain.value_objects import KeyStatus, ValidationStatus

from conftest import T0


class TestEvaluate:
    """Tests for evaluate()."""

    def test_missing_record_is_invalid(self):
        evaluation = evaluate(None, T0)

        assert evaluation.outcome == Invalid()
        assert evaluation.outcome.status == ValidationStatus.INVALID
        assert evaluation.transition is None

    def test_active_key_is_valid(self, make_record):
        evaluation = evaluate(make_record(uses=5), T0 + timedelta(days=1))

        assert evaluation.is_valid
        assert evaluation.outcome == Valid(days_remaining=29, uses_remaining=5)
        assert evaluation.transition is None

    def test_revoked_key_is_blocked(self, make_record):
        evaluation = evaluate(make_record().revoke(), T0)

        assert evaluation.outcome == Blocked(KeyStatus.REVOKED)
        assert evaluation.outcome.status == ValidationStatus.REVOKED

    def test_exhausted_key(self, make_record):
        record = make_record(uses=1).consume()

        evaluation = evaluate(record, T0)

        assert evaluation.outcome == Exhausted()
        assert evaluation.transition is None

    def test_overdue_key_transitions_to_expired(self, make_record):
        record = make_record(duration_days=1)

        evaluation = evaluate(record, T0 + timedelta(days=2))

        assert evaluation.outcome == Blocked(KeyStatus.EXPIRED)
        assert evaluation.transition is not None
        assert evaluation.transition.status == KeyStatus.EXPIRED
        assert evaluation.transition.uses_remaining == record.uses_remaining

    def test_overdue_without_auto_expire_has_no_transition(self, make_record):
        evaluation = evaluate(make_record(duration_days=1), T0 + timedelta(days=2), False)

        assert evaluation.outcome == Blocked(KeyStatus.EXPIRED)
        assert evaluation.transition is None

    def test_expiry_precedes_exhaustion(self, make_record):
        record = make_record(duration_days=1, uses=1).consume()

        evaluation = evaluate(record, T0 + timedelta(days=2))

        assert evaluation.outcome == Blocked(KeyStatus.EXPIRED)

    def test_stored_expired_status_survives_clock_moving_back(self, make_record):
        record = make_record(duration_days=1).mark_expired()

        evaluation = evaluate(record, T0)

        assert evaluation.outcome == Blocked(KeyStatus.EXPIRED)

    def test_expires_exactly_now_is_still_valid(self, make_record):
        record = make_record(duration_days=1)

        assert evaluate(record, record.expires_at).is_valid


class TestDaysRemaining:
    """Tests for days_remaining()."""

    def test_rounds_up(self, make_record):
        record = make_record(duration_days=30)

        assert days_remaining(record, T0 + timedelta(days=29, hours=12)) == 1
        assert days_remaining(record, record.expires_at - timedelta(minutes=30)) == 1

    def test_full_days(self, make_record):
        assert days_remaining(make_record(duration_days=30), T0) == 30

    def test_expired_is_not_positive(self, make_record):
        record = make_record(duration_days=1)

        assert days_remaining(record, T0 + timedelta(days=3)) <= 0


class TestOverdue:
    """Tests for overdue()."""

    def test_only_active_overdue_records(self, make_record):
        late = make_record(code="LATE-0001", duration_days=1)
        fresh = make_record(code="FRESH-001", duration_days=10)
        revoked = make_record(code="REVK-0001", duration_days=1).revoke()

        result = overdue([late, fresh, revoked], T0 + timedelta(days=2))

        assert result == [late]
