"""
Field merging for logpipe.

This module decides which parsed fields end up in an entry's extracted
mapping and under which names, resolving collisions with values that are
already there.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from logpipe.parsers.base import ParsedField
from logpipe.utils.logger import get_logger

logger = get_logger(__name__)

EXTRACTED_SUFFIX = "_extracted"


def merge_fields(
    fields: Iterable[ParsedField],
    existing: Mapping[str, Any],
    overwrite: bool = False,
    drop_invalid: bool = False,
) -> dict[str, str] | None:
    """
    Compute the values to apply onto an existing extracted mapping.

    In strict mode (``drop_invalid=True``) a single field whose key had to
    be sanitized discards the whole message: None is returned and nothing
    should be applied. In lenient mode every field is kept under its
    sanitized name.

    A field whose name already exists in ``existing`` replaces it when
    ``overwrite`` is set; otherwise it is stored as ``<name>_extracted``.
    Within one call, later fields win over earlier ones.

    Args:
        fields: Parsed fields, in message order
        existing: The entry's current extracted mapping (not modified)
        overwrite: Replace existing values instead of suffixing the name
        drop_invalid: Reject the whole message if any key was invalid

    Returns:
        Mapping of label name -> value to apply, or None if rejected
    """
    fields = list(fields)

    if drop_invalid:
        invalid = [field.key for field in fields if not field.valid]
        if invalid:
            logger.debug(
                f"Dropping {len(fields)} field(s): {len(invalid)} invalid label name(s)",
                extra={"context": {"invalid_keys": invalid}},
            )
            return None

    result: dict[str, str] = {}
    for field in fields:
        name = field.name
        if name in existing and not overwrite:
            name += EXTRACTED_SUFFIX
        result[name] = field.value

    return result
