"""
Data schemas for logpipe.

This module exposes the record model shared by every pipeline stage.
"""

from .entry import Entry, LookupStatus, TextLookup, lookup_text

__all__ = [
    "Entry",
    "LookupStatus",
    "TextLookup",
    "lookup_text",
]
