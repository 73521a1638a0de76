"""Tests for schemas.entry module."""

from datetime import datetime

import pytest

from logpipe.schemas import Entry, LookupStatus, TextLookup, lookup_text


class TestEntry:
    """Tests for Entry model."""

    def test_defaults(self) -> None:
        """Test default field values."""
        entry = Entry()

        assert entry.line == ""
        assert entry.labels == {}
        assert entry.extracted == {}
        assert isinstance(entry.timestamp, datetime)
        assert entry.timestamp.tzinfo is not None

    def test_mutable_mappings(self) -> None:
        """Test that stages can mutate the mappings in place."""
        entry = Entry(line="x")

        entry.extracted["key"] = "value"
        entry.labels["job"] = "windows"

        assert entry.extracted == {"key": "value"}
        assert entry.labels == {"job": "windows"}

    def test_whitespace_preserved(self) -> None:
        """Test that the line is not stripped."""
        entry = Entry(line="\tKey: value \r\n")

        assert entry.line == "\tKey: value \r\n"

    def test_extracted_accepts_any_value(self) -> None:
        """Test that extracted values keep their original type."""
        entry = Entry(extracted={"n": 1, "none": None, "raw": b"\xff"})

        assert entry.extracted == {"n": 1, "none": None, "raw": b"\xff"}

    def test_from_json(self) -> None:
        """Test validating an entry from JSON-like data."""
        entry = Entry.model_validate(
            {"line": "msg", "labels": {"job": "w"}, "extracted": {"message": "A: 1"}}
        )

        assert entry.labels == {"job": "w"}
        assert entry.extracted == {"message": "A: 1"}


class TestLookupText:
    """Tests for lookup_text function."""

    def test_found_string(self) -> None:
        """Test a plain string value."""
        result = lookup_text({"message": "A: 1"}, "message")

        assert result == TextLookup(LookupStatus.FOUND, text="A: 1", value_type="str")
        assert result.found

    def test_found_empty_string(self) -> None:
        """Test that an empty string is still text."""
        result = lookup_text({"message": ""}, "message")

        assert result.found
        assert result.text == ""

    def test_found_bytes(self) -> None:
        """Test that UTF-8 bytes are decoded."""
        result = lookup_text({"message": "Größe: 1".encode()}, "message")

        assert result.status is LookupStatus.FOUND
        assert result.text == "Größe: 1"

    def test_missing(self) -> None:
        """Test a key that is not present."""
        result = lookup_text({"other": "x"}, "message")

        assert result.status is LookupStatus.MISSING
        assert result.text is None
        assert not result.found

    @pytest.mark.parametrize("value", [None, 1, 1.5, False, ["a"], {"a": "b"}])
    def test_not_text(self, value: object) -> None:
        """Test values that are not text."""
        result = lookup_text({"message": value}, "message")

        assert result.status is LookupStatus.NOT_TEXT
        assert result.value_type == type(value).__name__

    def test_invalid_utf8_bytes(self) -> None:
        """Test bytes that do not decode as UTF-8."""
        result = lookup_text({"message": bytes([0xFF, 0xFE, 0xFD])}, "message")

        assert result.status is LookupStatus.INVALID_ENCODING

    def test_lone_surrogate(self) -> None:
        """Test a string that cannot be encoded as UTF-8."""
        result = lookup_text({"message": "bad \udcff"}, "message")

        assert result.status is LookupStatus.INVALID_ENCODING
