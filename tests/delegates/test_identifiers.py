"""Unit tests for delegate uuid canonicalization.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import uuid

import pytest

from delegate_auth.constants import UUID_VALIDATION_MESSAGE
from delegate_auth.delegates.identifiers import (
    canonicalize_uuid,
    is_valid_uuid_v4,
    strip_uuid,
    to_canonical_uuid,
)
from delegate_auth.exceptions import ValidationError


class TestToCanonicalUuid:
    """Tests for hyphen re-insertion."""

    def test_reinserts_hyphens_at_8_4_4_4_12(self, delegate_uuid: str, delegate_uuid_stripped: str) -> None:
        """Stripped form maps back to the original hyphenated form."""
        assert to_canonical_uuid(delegate_uuid_stripped) == delegate_uuid

    @pytest.mark.parametrize("value", ["", "abc", "0" * 31, "0" * 33])
    def test_wrong_length_gives_empty_string(self, value: str) -> None:
        assert to_canonical_uuid(value) == ""

    def test_strip_removes_every_hyphen(self) -> None:
        assert strip_uuid("a-b--c-") == "abc"


class TestIsValidUuidV4:
    """Tests for version 4 validation."""

    def test_accepts_lower_case_v4(self, delegate_uuid: str) -> None:
        assert is_valid_uuid_v4(delegate_uuid) is True

    def test_rejects_version_1(self) -> None:
        assert is_valid_uuid_v4("6ba7b810-9dad-11d1-80b4-00c04fd430c8") is False

    def test_rejects_upper_case(self, delegate_uuid: str) -> None:
        assert is_valid_uuid_v4(delegate_uuid.upper()) is False

    def test_rejects_non_rfc4122_variant(self) -> None:
        """Variant nibble 'c' is the Microsoft variant."""
        assert is_valid_uuid_v4("0f8fad5b-d9cb-469f-c165-70867728950e") is False

    def test_rejects_non_hex(self) -> None:
        assert is_valid_uuid_v4("zf8fad5b-d9cb-469f-a165-70867728950e") is False

    def test_rejects_empty(self) -> None:
        assert is_valid_uuid_v4("") is False


class TestCanonicalizeUuid:
    """Tests for the stored-form computation used by the registration guard."""

    def test_hyphenated_input_is_stripped(self, delegate_uuid: str, delegate_uuid_stripped: str) -> None:
        # Act
        result = canonicalize_uuid(delegate_uuid)

        # Assert
        assert result == delegate_uuid_stripped
        assert len(result) == 32

    def test_stripped_input_is_kept(self, delegate_uuid_stripped: str) -> None:
        assert canonicalize_uuid(delegate_uuid_stripped) == delegate_uuid_stripped

    def test_hyphens_in_odd_places_are_ignored(self, delegate_uuid_stripped: str) -> None:
        """Only the hex digits matter; hyphens anywhere are dropped."""
        # Arrange
        odd = delegate_uuid_stripped[:3] + "-" + delegate_uuid_stripped[3:]

        # Act / Assert
        assert canonicalize_uuid(odd) == delegate_uuid_stripped

    def test_missing_uuid_generates_fresh_v4(self) -> None:
        # Act
        first = canonicalize_uuid(None)
        second = canonicalize_uuid(None)

        # Assert
        assert len(first) == 32
        assert "-" not in first
        assert uuid.UUID(first).version == 4
        assert first != second

    @pytest.mark.parametrize(
        "value",
        [
            "0f8fad5b-d9cb-469f-a165-70867728950",  # 31 hex digits
            "0f8fad5b-d9cb-469f-a165-70867728950e0",  # 33 hex digits
            "6ba7b810-9dad-11d1-80b4-00c04fd430c8",  # version 1
            "0F8FAD5B-D9CB-469F-A165-70867728950E",  # upper case
            "{0f8fad5b-d9cb-469f-a165-70867728950e}",  # braces
            "",
        ],
    )
    def test_invalid_uuid_raises_validation_error(self, value: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            canonicalize_uuid(value)

        assert str(exc_info.value) == UUID_VALIDATION_MESSAGE

    def test_non_string_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            canonicalize_uuid(12345)  # type: ignore[arg-type]
