"""Per-platform behavior, keyed by a platform tag.

The set of supported operating systems is fixed. Each entry of
``PLATFORM_HANDLERS`` bundles the three operations that differ between them:
path validation, separator normalization and the reveal command.
"""

from __future__ import annotations

import ntpath
import posixpath
import sys
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Callable, Optional, Union

from open_in_explorer.dispatcher import (
    linux_reveal_command,
    macos_reveal_command,
    quote_posix_argument,
    quote_windows_argument,
    windows_reveal_command,
)
from open_in_explorer.exceptions import UnsupportedPlatformError
from open_in_explorer.validators import (
    normalize_separators,
    validate_linux_path,
    validate_macos_path,
    validate_windows_path,
)


class PlatformTag(Enum):
    """Supported operating systems, valued by their ``sys.platform`` name."""

    WINDOWS = "win32"
    MACOS = "darwin"
    LINUX = "linux"


@dataclass(frozen=True)
class PlatformHandler:
    """Validation, normalization and reveal command for one platform.

    Attributes:
        tag: Platform this handler serves
        validator: Grammar check returning None or a reason message key
        command_builder: Builds the built-in reveal command line
        quote: Quotes one argument for the platform shell
        pathmod: Path module used for lexical normalization
        ignore_exit_status: The built-in command reports failure on success
    """

    tag: PlatformTag
    validator: Callable[[str, bool], Optional[str]]
    command_builder: Callable[[str, bool], str]
    quote: Callable[[str], str]
    pathmod: ModuleType
    ignore_exit_status: bool = False

    @property
    def is_windows(self) -> bool:
        return self.tag is PlatformTag.WINDOWS

    def validate(self, path: str, allow_relative: bool = False) -> Optional[str]:
        """Return None for a valid path, else the reason message key."""
        return self.validator(path, allow_relative)

    def normalize(self, path: str) -> str:
        """Rewrite separators for this platform."""
        return normalize_separators(path, windows=self.is_windows)

    def reveal_command(self, path: str, is_file: bool) -> str:
        """Return the built-in command line revealing ``path``."""
        return self.command_builder(path, is_file)


PLATFORM_HANDLERS: dict[PlatformTag, PlatformHandler] = {
    PlatformTag.WINDOWS: PlatformHandler(
        tag=PlatformTag.WINDOWS,
        validator=validate_windows_path,
        command_builder=windows_reveal_command,
        quote=quote_windows_argument,
        pathmod=ntpath,
        # explorer.exe exits with status 1 even when it succeeds
        ignore_exit_status=True,
    ),
    PlatformTag.MACOS: PlatformHandler(
        tag=PlatformTag.MACOS,
        validator=validate_macos_path,
        command_builder=macos_reveal_command,
        quote=quote_posix_argument,
        pathmod=posixpath,
    ),
    PlatformTag.LINUX: PlatformHandler(
        tag=PlatformTag.LINUX,
        validator=validate_linux_path,
        command_builder=linux_reveal_command,
        quote=quote_posix_argument,
        pathmod=posixpath,
    ),
}


def detect_platform(platform_name: Optional[str] = None) -> PlatformTag:
    """
    Map a ``sys.platform`` value to a PlatformTag.

    Args:
        platform_name: Value to map. If None, uses the running interpreter's

    Raises:
        UnsupportedPlatformError: If the platform has no handler
    """
    name = platform_name if platform_name is not None else sys.platform
    if name.startswith("linux"):
        return PlatformTag.LINUX
    try:
        return PlatformTag(name)
    except ValueError as exc:
        raise UnsupportedPlatformError("No file manager handler", platform=name) from exc


def get_platform_handler(platform: Union[PlatformTag, str, None] = None) -> PlatformHandler:
    """Return the handler for a tag, a platform name, or the running OS."""
    tag = platform if isinstance(platform, PlatformTag) else detect_platform(platform)
    return PLATFORM_HANDLERS[tag]
