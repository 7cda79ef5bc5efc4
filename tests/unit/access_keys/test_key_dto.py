"""
Unit tests for key result DTOs.
"""
import pytest

from access_keys.application.dto.key_dto import ValidationResult
from core.domain.exceptions import (
    InvalidKeyFormatError,
    KeyExhaustedError,
    KeyExpiredError,
    KeyNotFoundError,
    KeyRevokedError,
    StoreUnavailableError,
)
from core.domain.value_objects import ValidationStatus


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_valid_result_does_not_raise(self):
        ValidationResult(True, "Access granted", ValidationStatus.ACTIVE).raise_for_status()

    @pytest.mark.parametrize(
        "status,error",
        [
            (ValidationStatus.INVALID, KeyNotFoundError),
            (ValidationStatus.REVOKED, KeyRevokedError),
            (ValidationStatus.EXPIRED, KeyExpiredError),
            (ValidationStatus.EXHAUSTED, KeyExhaustedError),
            (ValidationStatus.ERROR, StoreUnavailableError),
            (ValidationStatus.INVALID_FORMAT, InvalidKeyFormatError),
        ],
    )
    def test_raise_for_status(self, status, error):
        result = ValidationResult(False, "refused", status)

        with pytest.raises(error, match="refused"):
            result.raise_for_status()

    def test_to_dict_omits_missing_key_data(self):
        result = ValidationResult(False, "Key not found", ValidationStatus.INVALID)

        assert result.to_dict() == {
            "valid": False,
            "message": "Key not found",
            "status": "invalid",
        }
