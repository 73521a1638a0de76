"""
Data schemas for records flowing through a logpipe pipeline.

An Entry carries the raw log line together with two mappings: ``labels``,
the indexed/queryable field set, and ``extracted``, the scratch values that
stages hand to each other.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Entry(BaseModel):
    """
    A single log record as seen by pipeline stages.

    Stages receive entries by reference and mutate ``labels`` and
    ``extracted`` in place before forwarding them downstream.

    Attributes:
        line: The raw log line
        labels: Queryable label set (label name -> label value)
        extracted: Intermediate values shared between stages
        timestamp: Time the entry was read
    """

    line: str = Field(default="", description="Raw log line")
    labels: dict[str, str] = Field(default_factory=dict)
    extracted: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(
        str_strip_whitespace=False,  # Event log text is whitespace-sensitive
    )


class LookupStatus(str, Enum):
    """Outcome of looking up a text value in an extracted mapping."""

    FOUND = "found"
    MISSING = "missing"
    NOT_TEXT = "not_text"
    INVALID_ENCODING = "invalid_encoding"


@dataclass(frozen=True)
class TextLookup:
    """
    Result of lookup_text().

    Attributes:
        status: Whether the value was found and usable as text
        text: The text value when status is FOUND, otherwise None
        value_type: Name of the stored value's type, for diagnostics
    """

    status: LookupStatus
    text: str | None = None
    value_type: str | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


def lookup_text(extracted: dict[str, Any], key: str) -> TextLookup:
    """
    Look up ``key`` in an extracted mapping and return it as text.

    ``str`` values must be encodable as UTF-8 (lone surrogates are not),
    ``bytes`` values must decode as UTF-8. Any other kind of value, including
    None and numbers, is reported as NOT_TEXT.

    Args:
        extracted: The entry's extracted mapping
        key: Name of the value to read

    Returns:
        A TextLookup describing the outcome
    """
    if key not in extracted:
        return TextLookup(LookupStatus.MISSING)

    value = extracted[key]
    value_type = type(value).__name__

    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return TextLookup(LookupStatus.INVALID_ENCODING, value_type=value_type)
        return TextLookup(LookupStatus.FOUND, text=value, value_type=value_type)

    if isinstance(value, (bytes, bytearray)):
        try:
            text = bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return TextLookup(LookupStatus.INVALID_ENCODING, value_type=value_type)
        return TextLookup(LookupStatus.FOUND, text=text, value_type=value_type)

    return TextLookup(LookupStatus.NOT_TEXT, value_type=value_type)
