"""Clean up raw selected text before it is treated as a path."""

from __future__ import annotations

import os.path
from types import ModuleType

_QUOTE_TABLE = str.maketrans("", "", "\"'")

# What lexical normalization produces for an input with no path in it
_EMPTY_MARKERS = frozenset({"", "."})


def sanitize(raw: str, pathmod: ModuleType = os.path) -> str:
    """Trim, unquote and lexically normalize a raw selection.

    Every single and double quote is removed, not only the surrounding ones.
    ``.`` and ``..`` segments and repeated separators are collapsed by
    ``pathmod.normpath`` without touching the filesystem.

    Args:
        raw: Untrusted text, typically a user selection
        pathmod: Path flavour used for normalization (``os.path``, ``ntpath``
            or ``posixpath``)

    Returns:
        The sanitized path, or "" when nothing path-like is left
    """
    if not raw:
        return ""

    candidate = raw.strip().translate(_QUOTE_TABLE).strip()
    if not candidate:
        return ""

    # Dropping a trailing separator can expose whitespace, so repeat until stable
    while True:
        normalized = pathmod.normpath(candidate).strip()
        if normalized == candidate or not normalized:
            break
        candidate = normalized

    if normalized in _EMPTY_MARKERS:
        return ""
    return normalized


def is_empty_path(path: str) -> bool:
    """Return True if a sanitized path means "no valid path"."""
    return path.strip() in _EMPTY_MARKERS
