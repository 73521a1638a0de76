"""
Core functionality for logpipe.

This module exposes the public API for merging parsed fields into entries.
"""

from .merger import EXTRACTED_SUFFIX, merge_fields

__all__ = [
    "EXTRACTED_SUFFIX",
    "merge_fields",
]
