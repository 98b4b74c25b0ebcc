"""Symbolic link handling for the path being opened."""

from __future__ import annotations

import asyncio
import os
from enum import Enum
from typing import Awaitable, Callable, Optional

from open_in_explorer.config import ExplorerConfig
from open_in_explorer.logging_config import get_logger

logger = get_logger(__name__)


class SymlinkChoice(Enum):
    """User decision when a symbolic link is not followed automatically."""

    FOLLOW = "follow"
    OPEN_LINK = "open_link"


# Receives (link path, link target); None means the prompt was dismissed
SymlinkPrompt = Callable[[str, str], Awaitable[Optional[SymlinkChoice]]]


def _probe_link(path: str) -> Optional[str]:
    """Return the fully resolved target if ``path`` is a symlink, else None."""
    if not os.path.islink(path):
        # islink hides lstat errors, so surface a vanished entry explicitly
        os.lstat(path)
        return None
    return os.path.realpath(path)


async def resolve_symlink(
    path: str,
    config: ExplorerConfig,
    prompt: SymlinkPrompt,
) -> str:
    """
    Decide which path to open when ``path`` may be a symbolic link.

    Args:
        path: Validated, normalized path
        config: Settings snapshot of the current run
        prompt: Asks the user whether to follow the link

    Returns:
        The link target when followed, otherwise ``path`` unchanged
    """
    try:
        target = await asyncio.to_thread(_probe_link, path)
    except (OSError, ValueError) as e:
        logger.warning("Symlink probe failed for %s, using path as-is: %s", path, e)
        return path

    if target is None:
        return path

    if config.follow_symlinks:
        logger.debug("Following symlink %s -> %s", path, target)
        return target

    choice = await prompt(path, target)
    if choice is SymlinkChoice.FOLLOW:
        logger.debug("User chose to follow symlink %s -> %s", path, target)
        return target

    logger.debug("Opening symlink %s itself", path)
    return path
