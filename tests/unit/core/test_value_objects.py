"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import Email, KeyCode, KeyStatus, ValidationStatus


class TestEmail:
    """Tests for Email value object."""

    def test_valid_email(self):
        """Test valid email creation."""
        email = Email("test@example.com")
        assert str(email) == "test@example.com"
        assert email.value == "test@example.com"

    def test_invalid_email_no_at(self):
        """Test invalid email without @."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("invalid-email")

    def test_invalid_email_empty(self):
        """Test invalid empty email."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("")


class TestKeyCode:
    """Tests for KeyCode value object."""

    def test_normalize_strips_and_uppercases(self):
        assert KeyCode.normalize("  glb-abcd-2345-wxyz \n") == "GLB-ABCD-2345-WXYZ"

    def test_normalize_none(self):
        assert KeyCode.normalize(None) == ""

    @pytest.mark.parametrize(
        "value",
        ["ABCD", "GLB-ABCD-2345-WXYZ", "DEMO-ABCD-1234-EFGH", "A" * 20],
    )
    def test_well_formed(self, value):
        assert KeyCode.is_well_formed(value) is True
        assert str(KeyCode(value)) == value

    @pytest.mark.parametrize(
        "value",
        ["", "AB", "ABC", "A" * 21, "abcd-efgh", "GLB_ABCD", "GLB ABCD"],
    )
    def test_malformed(self, value):
        assert KeyCode.is_well_formed(value) is False
        with pytest.raises(ValueError, match="Invalid key code format"):
            KeyCode(value)

    def test_equality_by_value(self):
        assert KeyCode("ABCD-1234") == KeyCode("ABCD-1234")
        assert hash(KeyCode("ABCD-1234")) == hash(KeyCode("ABCD-1234"))

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("GLB-ABCD-2345-WXYZ", "**************WXYZ"),
            ("ABCD", "****"),
            ("", ""),
        ],
    )
    def test_masked_keeps_only_last_four(self, value, expected):
        assert KeyCode.masked(value) == expected


class TestStatuses:
    """Tests for status enums."""

    def test_stored_statuses_map_to_validation_statuses(self):
        for status in KeyStatus:
            assert ValidationStatus(status.value).value == status.value

    def test_str(self):
        assert str(KeyStatus.REVOKED) == "revoked"
        assert str(ValidationStatus.EXHAUSTED) == "exhausted"
