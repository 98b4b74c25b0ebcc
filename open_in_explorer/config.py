"""
Configuration for open-in-explorer.

``ExplorerConfig`` is an immutable snapshot of the user settings. A fresh
snapshot is loaded at the start of every run and passed explicitly through the
pipeline, so a changed setting takes effect on the next run and never in the
middle of one.

Settings are read from a TOML file using the option names of the editor
extension this tool grew out of, either at the top level or under an
``[openInExplorer]`` table::

    [openInExplorer]
    customExplorerLinux = "nautilus"
    textFileScanBytes = 4096
    largeFileSizeLimit = 5242880
    confirmLargeFileOpen = true
    allowRelativePaths = false
    followSymlinks = true
    language = "en"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import click

from open_in_explorer.classifier import MAX_SCAN_BYTES
from open_in_explorer.logging_config import APP_NAME, get_logger
from open_in_explorer.messages import Language
from open_in_explorer.platforms import PlatformTag

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExplorerDefaults:
    """Default values for every recognized option."""

    TEXT_FILE_SCAN_BYTES: int = 4096
    LARGE_FILE_SIZE_LIMIT: int = 5_242_880  # 5MB
    CONFIRM_LARGE_FILE_OPEN: bool = True
    ALLOW_RELATIVE_PATHS: bool = False
    FOLLOW_SYMLINKS: bool = True
    LANGUAGE: str = Language.JA.value
    CONFIG_FILE_NAME: str = "config.toml"
    CONFIG_TABLE: str = "openInExplorer"


DEFAULTS = ExplorerDefaults()


@dataclass(frozen=True)
class ExplorerConfig:
    """Settings snapshot for a single run.

    Attributes:
        custom_explorer_windows: File manager command used on Windows ("" = built-in)
        custom_explorer_macos: File manager command used on macOS ("" = built-in)
        custom_explorer_linux: File manager command used on Linux ("" = built-in)
        text_file_scan_bytes: Number of leading bytes sniffed for text detection
        large_file_size_limit: Size in bytes from which a text file counts as large
        confirm_large_file_open: Ask before opening large text files
        allow_relative_paths: Accept relative paths (never with ``..``)
        follow_symlinks: Follow symbolic links without asking
        language: Message language ("ja" or "en")
    """

    custom_explorer_windows: str = ""
    custom_explorer_macos: str = ""
    custom_explorer_linux: str = ""
    text_file_scan_bytes: int = DEFAULTS.TEXT_FILE_SCAN_BYTES
    large_file_size_limit: int = DEFAULTS.LARGE_FILE_SIZE_LIMIT
    confirm_large_file_open: bool = DEFAULTS.CONFIRM_LARGE_FILE_OPEN
    allow_relative_paths: bool = DEFAULTS.ALLOW_RELATIVE_PATHS
    follow_symlinks: bool = DEFAULTS.FOLLOW_SYMLINKS
    language: str = DEFAULTS.LANGUAGE

    def custom_explorer_for(self, tag: PlatformTag) -> str:
        """Return the configured custom command for a platform, stripped."""
        command = {
            PlatformTag.WINDOWS: self.custom_explorer_windows,
            PlatformTag.MACOS: self.custom_explorer_macos,
            PlatformTag.LINUX: self.custom_explorer_linux,
        }[tag]
        return command.strip()


# Option name in the settings file -> ExplorerConfig field
OPTION_NAMES = {
    "customExplorerWindows": "custom_explorer_windows",
    "customExplorerMacOS": "custom_explorer_macos",
    "customExplorerLinux": "custom_explorer_linux",
    "textFileScanBytes": "text_file_scan_bytes",
    "largeFileSizeLimit": "large_file_size_limit",
    "confirmLargeFileOpen": "confirm_large_file_open",
    "allowRelativePaths": "allow_relative_paths",
    "followSymlinks": "follow_symlinks",
    "language": "language",
}


def default_config_path() -> Path:
    """Return the per-user settings file location."""
    return Path(click.get_app_dir(APP_NAME)) / DEFAULTS.CONFIG_FILE_NAME


def _coerce_option(field_name: str, value: Any, default: Any) -> Any:
    """Check one option value, returning the default when it is unusable."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
    elif isinstance(default, int):
        # bool is an int subclass; reject it for numeric options
        if isinstance(value, int) and not isinstance(value, bool):
            if field_name == "text_file_scan_bytes" and not 1 <= value <= MAX_SCAN_BYTES:
                logger.warning(
                    "textFileScanBytes must be between 1 and %d, got %d", MAX_SCAN_BYTES, value
                )
                return default
            if value < 0:
                logger.warning("%s must not be negative, got %d", field_name, value)
                return default
            return value
    elif field_name == "language":
        if isinstance(value, str) and value.strip().lower() in {lang.value for lang in Language}:
            return value.strip().lower()
    elif isinstance(value, str):
        return value

    logger.warning(
        "Ignoring invalid value %r for %s, using default %r", value, field_name, default
    )
    return default


def config_from_mapping(data: dict[str, Any]) -> ExplorerConfig:
    """Build a config snapshot from parsed settings data.

    Unknown options are ignored; invalid values fall back to their defaults.
    """
    table = data.get(DEFAULTS.CONFIG_TABLE)
    options = table if isinstance(table, dict) else data

    base = ExplorerConfig()
    values: dict[str, Any] = {}
    for option, field_name in OPTION_NAMES.items():
        if option in options:
            values[field_name] = _coerce_option(
                field_name, options[option], getattr(base, field_name)
            )

    unknown = set(options) - set(OPTION_NAMES) - {DEFAULTS.CONFIG_TABLE}
    if unknown:
        logger.debug("Ignoring unknown options: %s", ", ".join(sorted(unknown)))

    return ExplorerConfig(**values)


def load_config(path: Optional[Union[str, Path]] = None) -> ExplorerConfig:
    """
    Load a fresh settings snapshot.

    Nothing is cached: every call reads the file again.

    Args:
        path: Settings file. If None, uses the per-user application directory

    Returns:
        ExplorerConfig with defaults for anything missing or invalid
    """
    config_path = Path(path) if path is not None else default_config_path()

    if not config_path.exists():
        logger.debug("No settings file at %s, using defaults", config_path)
        return ExplorerConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Could not read settings file %s: %s", config_path, e)
        return ExplorerConfig()

    config = config_from_mapping(data)
    logger.debug("Loaded settings from %s", config_path)
    return config
