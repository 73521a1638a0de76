"""
Base parser interface for logpipe text parsers.

A text parser turns one message blob into a sequence of ParsedField values
which the field merger then applies onto an entry's extracted mapping.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field


class ParsedField(BaseModel):
    """
    A single key/value pair found in a message.

    Attributes:
        indent: Nesting level of the line (number of leading tabs)
        key: Raw key text as it appeared in the message, tabs stripped
        name: Sanitized label name, prefixed with one underscore per level
        value: Raw value text
        valid: False if the key had to be sanitized to become a label name
    """

    indent: int = Field(default=0, ge=0)
    key: str
    name: str = Field(..., min_length=1)
    value: str
    valid: bool

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=False,
    )


class BaseParser(ABC):
    """
    Abstract base class for message text parsers.

    Implementations must:
    1. Split the text into logical lines
    2. Skip lines that carry no key/value structure
    3. Yield one ParsedField per key/value line, in source order

    Parsing never raises on malformed text; unparseable lines are skipped.
    """

    @abstractmethod
    def parse(self, text: str) -> Iterator[ParsedField]:
        """
        Parse a message and yield the fields found in it.

        Args:
            text: The raw message text

        Returns:
            An iterator over ParsedField objects. The iterator is single-use;
            call parse() again to re-read the same text.
        """
        pass

    @staticmethod
    @abstractmethod
    def get_parser_name() -> str:
        """
        Return the name of this parser.

        Returns:
            Parser name (e.g., "eventlog")
        """
        pass
