"""Text vs. binary detection for files about to be opened.

Detection order:
1. Extension lists for unambiguous cases (``.py`` is text, ``.zip`` binary)
2. Byte-order marks, which always mean text
3. Any NUL byte means binary
4. More than 20% control characters means binary
5. More than 90% bytes above 0x7F means binary
6. Everything else is text

Only a bounded prefix of the file is read. A file that cannot be read is
reported as binary so it is revealed in the file manager instead of being
loaded into an editor.
"""

from __future__ import annotations

import asyncio
import os
from enum import Enum

from open_in_explorer.logging_config import get_logger

logger = get_logger(__name__)


class Classification(Enum):
    """Content class of a regular file."""

    TEXT = "text"
    BINARY = "binary"


DEFAULT_SCAN_BYTES = 4096
MAX_SCAN_BYTES = 1_048_576  # 1MB
CONTROL_CHAR_THRESHOLD = 0.2
HIGH_BYTE_THRESHOLD = 0.9

_UTF8_BOM = b"\xef\xbb\xbf"
_UTF16_BE_BOM = b"\xfe\xff"
_UTF16_LE_BOM = b"\xff\xfe"
_UTF32_BE_BOM = b"\x00\x00\xfe\xff"
_UTF32_LE_BOM = b"\xff\xfe\x00\x00"

# Control bytes that regularly appear in text: TAB, LF, CR
_TEXT_CONTROL_BYTES = frozenset({0x09, 0x0A, 0x0D})

TEXT_EXTENSIONS = frozenset(
    {
        ".txt", ".md", ".markdown", ".rst", ".log", ".csv", ".tsv",
        ".json", ".jsonl", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf",
        ".xml", ".html", ".htm", ".css", ".scss", ".less", ".svg",
        ".py", ".pyi", ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx",
        ".java", ".kt", ".scala", ".go", ".rs", ".c", ".h", ".cpp", ".hpp",
        ".cc", ".cs", ".rb", ".php", ".pl", ".lua", ".swift", ".m",
        ".sh", ".bash", ".zsh", ".fish", ".ps1", ".bat", ".cmd",
        ".sql", ".r", ".tex", ".properties", ".env", ".gitignore",
        ".dockerfile", ".mk", ".gradle", ".vue", ".svelte",
    }
)

BINARY_EXTENSIONS = frozenset(
    {
        # Archives
        ".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".zst",
        # Executables and libraries
        ".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".a", ".lib",
        ".class", ".jar", ".pyc", ".wasm", ".msi", ".dmg", ".iso", ".img",
        # Images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".tif", ".tiff",
        ".webp", ".heic", ".psd",
        # Audio and video
        ".mp3", ".wav", ".flac", ".ogg", ".m4a", ".aac",
        ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".webm",
        # Documents and data
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".odt", ".ods", ".odp", ".sqlite", ".db", ".parquet", ".pkl",
        # Fonts
        ".ttf", ".otf", ".woff", ".woff2",
    }
)


def classify_by_extension(extension: str) -> Classification | None:
    """Return the class implied by a file extension, or None if unknown."""
    ext = extension.lower()
    if ext in TEXT_EXTENSIONS:
        return Classification.TEXT
    if ext in BINARY_EXTENSIONS:
        return Classification.BINARY
    return None


def has_text_bom(data: bytes) -> bool:
    """Return True if the data starts with a UTF-8/16/32 byte-order mark.

    ``FF FE`` only counts as UTF-16LE when it is not the start of the
    UTF-32LE mark ``FF FE 00 00``.
    """
    if data.startswith(_UTF8_BOM) or data.startswith(_UTF32_BE_BOM):
        return True
    if data.startswith(_UTF16_BE_BOM):
        return True
    return data.startswith(_UTF16_LE_BOM) and not data.startswith(_UTF32_LE_BOM)


def classify_bytes(
    data: bytes,
    control_threshold: float = CONTROL_CHAR_THRESHOLD,
    high_byte_threshold: float = HIGH_BYTE_THRESHOLD,
) -> Classification:
    """Classify a byte prefix as text or binary."""
    if has_text_bom(data):
        return Classification.TEXT

    if not data:
        return Classification.TEXT

    if b"\x00" in data:
        return Classification.BINARY

    total = len(data)
    control = sum(
        1 for byte in data if (byte < 32 and byte not in _TEXT_CONTROL_BYTES) or byte == 127
    )
    if control / total > control_threshold:
        return Classification.BINARY

    high = sum(1 for byte in data if byte > 127)
    if high / total > high_byte_threshold:
        return Classification.BINARY

    return Classification.TEXT


def read_prefix(path: str, scan_bytes: int) -> bytes:
    """Read the first ``scan_bytes`` bytes of a file, clamped to 1..MAX_SCAN_BYTES."""
    with open(path, "rb") as f:
        return f.read(min(max(1, scan_bytes), MAX_SCAN_BYTES))


async def classify(path: str, scan_bytes: int = DEFAULT_SCAN_BYTES) -> Classification:
    """
    Classify a regular file as text or binary.

    Args:
        path: Path of an existing regular file
        scan_bytes: Number of leading bytes to inspect

    Returns:
        Classification.TEXT or Classification.BINARY (also on read errors)
    """
    by_extension = classify_by_extension(os.path.splitext(path)[1])
    if by_extension is not None:
        logger.debug("Classified %s as %s by extension", path, by_extension.value)
        return by_extension

    try:
        data = await asyncio.to_thread(read_prefix, path, scan_bytes)
    except OSError as e:
        logger.warning("Could not read %s for classification, treating as binary: %s", path, e)
        return Classification.BINARY

    result = classify_bytes(data)
    logger.debug("Classified %s as %s from %d bytes", path, result.value, len(data))
    return result
