"""Path grammar checks for the supported operating systems.

Each validator returns ``None`` for a valid path, otherwise the message key
describing why the path was rejected. A ``..`` segment is always rejected,
even when relative paths are allowed, so a selection can never walk out of
the directory it names.
"""

from __future__ import annotations

import re
from typing import Optional

_SEGMENT_SPLIT_RE = re.compile(r"[\\/]+")

# <letter>:\ followed by at least one character Windows allows in a path
_WINDOWS_DRIVE_RE = re.compile(r'^[A-Za-z]:[\\/][^<>:"|?*\x00-\x1f]+$')

# \\host\share[\...]
_WINDOWS_UNC_RE = re.compile(r"^\\\\[^\s\\/]+\\[^\s\\/]+")


def has_traversal_segment(path: str) -> bool:
    """Return True if any segment of the path is ``..``."""
    return any(segment == ".." for segment in _SEGMENT_SPLIT_RE.split(path))


def _has_nul(path: str) -> bool:
    return "\x00" in path


def is_windows_absolute(path: str) -> bool:
    """Return True for drive (``C:\\...``) and UNC (``\\\\host\\share``) paths."""
    return bool(_WINDOWS_DRIVE_RE.match(path) or _WINDOWS_UNC_RE.match(path))


def validate_windows_path(path: str, allow_relative: bool = False) -> Optional[str]:
    """Validate a path against the Windows grammar.

    Accepts a local drive path, a UNC path, or (with ``allow_relative``) any
    other path without a ``..`` segment.
    """
    if not path or _has_nul(path) or has_traversal_segment(path):
        return "invalid_windows_path"
    if is_windows_absolute(path):
        return None
    if allow_relative:
        return None
    return "invalid_windows_path"


def _validate_posix_path(path: str, allow_relative: bool, reason: str) -> Optional[str]:
    if not path or _has_nul(path) or has_traversal_segment(path):
        return reason
    if path.startswith("/"):
        return None
    if allow_relative:
        return None
    return reason


def validate_macos_path(path: str, allow_relative: bool = False) -> Optional[str]:
    """Validate a path against the macOS grammar (absolute, no ``..``)."""
    return _validate_posix_path(path, allow_relative, "invalid_macos_path")


def validate_linux_path(path: str, allow_relative: bool = False) -> Optional[str]:
    """Validate a path against the Linux grammar (absolute, no ``..``)."""
    return _validate_posix_path(path, allow_relative, "invalid_linux_path")


def normalize_separators(path: str, windows: bool) -> str:
    """Rewrite separators to backslashes on Windows, forward slashes elsewhere."""
    if windows:
        return path.replace("/", "\\")
    return path.replace("\\", "/")
