"""
Label name sanitization.

Valid label names follow the Prometheus grammar ``[a-zA-Z_][a-zA-Z0-9_]*``.
"""

import string

_LEADING_CHARS = frozenset(string.ascii_letters + "_")
_LABEL_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def sanitize(raw: str) -> tuple[str, bool]:
    """
    Rewrite arbitrary text into a valid label name.

    Every character that is not allowed at its position is replaced with an
    underscore. An empty input becomes ``"_"``.

    Args:
        raw: Text to turn into a label name

    Returns:
        Tuple of (label name, whether any character had to be replaced)
    """
    if not raw:
        return "_", True

    chars = []
    modified = False
    for i, ch in enumerate(raw):
        allowed = _LEADING_CHARS if i == 0 else _LABEL_CHARS
        if ch in allowed:
            chars.append(ch)
        else:
            chars.append("_")
            modified = True

    return "".join(chars), modified


def is_valid_label_name(name: str) -> bool:
    """Return True if ``name`` is non-empty and needs no sanitization."""
    if not name:
        return False
    _, modified = sanitize(name)
    return not modified
