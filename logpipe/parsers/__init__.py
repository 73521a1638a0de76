"""
Message text parsers for logpipe.

This module exposes the public API for label sanitization and the
event log message parser.
"""

from .base import BaseParser, ParsedField
from .eventlog_parser import EventLogParser, parse
from .labels import is_valid_label_name, sanitize

__all__ = [
    "BaseParser",
    "ParsedField",
    "EventLogParser",
    "parse",
    "sanitize",
    "is_valid_label_name",
]
