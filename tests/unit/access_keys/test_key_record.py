"""
Unit tests for KeyRecord domain entity.
"""
import re
from datetime import timedelta

import pytest

from access_keys.domain.key_record import (
    KEY_CODE_ALPHABET,
    KeyRecord,
    UsageEntry,
    generate_key_code,
)
from core.domain.value_objects import KeyCode, KeyStatus

from conftest import T0


class TestGenerateKeyCode:
    """Tests for key code generation."""

    def test_format(self):
        code = generate_key_code()
        assert re.fullmatch(r"GLB-[A-Z2-9]{4}-[A-Z2-9]{4}-[A-Z2-9]{4}", code)
        assert KeyCode.is_well_formed(code)

    def test_alphabet_excludes_ambiguous_characters(self):
        for _ in range(50):
            body = generate_key_code().replace("GLB-", "").replace("-", "")
            assert set(body) <= set(KEY_CODE_ALPHABET)
            assert not set(body) & {"I", "O", "0", "1"}

    def test_custom_prefix(self):
        assert generate_key_code("TEST").startswith("TEST-")


class TestKeyRecord:
    """Tests for KeyRecord domain entity."""

    def test_create(self):
        record = KeyRecord.create(duration_days=30, uses_limit=100, price=90.0, now=T0)

        assert record.status == KeyStatus.ACTIVE
        assert record.expires_at == T0 + timedelta(days=30)
        assert record.uses_remaining == 100
        assert record.total_uses == 100
        assert record.created_by == "admin"
        assert record.usage_log == ()
        assert record.code.startswith("GLB-")
        assert record.id

    def test_consume_decrements_by_one(self, make_record):
        record = make_record(uses=2)

        consumed = record.consume()

        assert consumed.uses_remaining == 1
        assert consumed.total_uses == 2
        assert record.uses_remaining == 2
        assert consumed.uses_consumed == 1

    def test_consume_exhausted_raises(self, make_record):
        record = make_record(uses=1).consume()

        assert record.is_exhausted
        with pytest.raises(ValueError, match="exhausted"):
            record.consume()

    def test_status_transitions_return_new_records(self, make_record):
        record = make_record()

        revoked = record.revoke()
        assert revoked.status == KeyStatus.REVOKED
        assert record.status == KeyStatus.ACTIVE
        assert revoked.reactivate().status == KeyStatus.ACTIVE
        assert record.mark_expired().status == KeyStatus.EXPIRED

    def test_is_overdue(self, make_record):
        record = make_record(duration_days=1)

        assert not record.is_overdue(T0 + timedelta(days=1))
        assert record.is_overdue(T0 + timedelta(days=1, seconds=1))

    def test_with_usage_and_prune(self, make_record):
        old = UsageEntry(T0 - timedelta(days=40), "10.0.0.1", "agent")
        new = UsageEntry(T0, "10.0.0.2", "agent")
        record = make_record().with_usage(old).with_usage(new)

        pruned = record.prune_usage(T0 - timedelta(days=30))

        assert record.usage_log == (old, new)
        assert pruned.usage_log == (new,)

    def test_invalid_counters_rejected(self, make_record):
        with pytest.raises(ValueError):
            KeyRecord(
                id="x",
                code="ABCD",
                created_at=T0,
                expires_at=T0,
                duration_days=1,
                uses_remaining=5,
                total_uses=4,
            )

    def test_empty_code_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            KeyRecord(
                id="x",
                code="  ",
                created_at=T0,
                expires_at=T0,
                duration_days=1,
                uses_remaining=0,
                total_uses=0,
            )
