r"""
Parser for Windows event log message text.

Event log messages are CRLF-separated lines of ``Key: Value`` pairs. Lines
ending at the colon act as section headers, and tab-indented lines beneath
them belong to that section::

    Cryptographic operation.

    Subject:
    \tSecurity ID:\t\tS-1-5-18
    \tAccount Name:\t\tGIS-SHARES$

Free prose lines without a colon are ignored.
"""

from collections.abc import Iterator

from logpipe.parsers.base import BaseParser, ParsedField
from logpipe.parsers.labels import sanitize

LINE_SEPARATOR = "\r\n"
KEY_VALUE_SEPARATOR = ":"
INDENT_CHAR = "\t"


class EventLogParser(BaseParser):
    """
    Parser for ``Key: Value`` structured event log messages.

    Handles:
    - CRLF line endings only; a bare LF stays part of the line's content
    - Section headers (``Subject:``) as fields with an empty value
    - Tab-indented sub-fields, named ``_<key>`` per indentation level
    - Values aligned with tabs after the colon; the alignment tabs are dropped
    - Values containing colons or inner tabs, which are kept verbatim
    """

    def parse(self, text: str) -> Iterator[ParsedField]:
        """
        Parse an event log message.

        Args:
            text: The raw message text

        Yields:
            ParsedField objects in the order their lines appear
        """
        for line in text.split(LINE_SEPARATOR):
            field = self._parse_line(line)
            if field is not None:
                yield field

    @staticmethod
    def get_parser_name() -> str:
        return "eventlog"

    def _parse_line(self, line: str) -> ParsedField | None:
        """
        Parse a single line into a field.

        Args:
            line: One line of the message, without its terminator

        Returns:
            The parsed field, or None if the line has no key/value separator
        """
        body = line.lstrip(INDENT_CHAR)
        indent = len(line) - len(body)

        key, sep, value = body.partition(KEY_VALUE_SEPARATOR)
        if not sep:
            return None

        # One space, then any tabs, separate the key from its value
        if value.startswith(" "):
            value = value[1:]
        value = value.lstrip(INDENT_CHAR)

        name, modified = sanitize(key)

        return ParsedField(
            indent=indent,
            key=key,
            name="_" * indent + name,
            value=value,
            valid=not modified,
        )


_default_parser = EventLogParser()


def parse(text: str) -> Iterator[ParsedField]:
    """
    Parse an event log message with the default parser.

    Args:
        text: The raw message text

    Returns:
        A single-use iterator over the parsed fields
    """
    return _default_parser.parse(text)
