"""
Pipeline from selected text to "open in editor" or "reveal in file manager".

One call to ``PathOpener.run`` is one run of the state machine::

    START -> SANITIZED -> VALIDATED -> STATED -> (SYMLINK_RESOLVED) -> CLASSIFIED
          -> DISPATCHED | OPENED_IN_EDITOR | CANCELLED | FAILED

Directories, special files (FIFOs, sockets, devices) and files without an
extension are always revealed. Regular files with an extension are classified;
binary files are revealed, text files are opened in the editor, with a
confirmation prompt first for large text files.

Every run loads a fresh settings snapshot and keeps all of its state in local
values, so concurrent runs share nothing.
"""

from __future__ import annotations

import asyncio
import errno
import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from open_in_explorer.classifier import Classification, classify
from open_in_explorer.config import ExplorerConfig, load_config
from open_in_explorer.dispatcher import CommandRunner, DispatchResult, reveal, run_shell_command
from open_in_explorer.exceptions import (
    DispatchError,
    EditorOpenError,
    InvalidInputError,
    InvalidPathGrammarError,
    OpenInExplorerError,
    PathNotFoundError,
    StatError,
)
from open_in_explorer.logging_config import get_logger
from open_in_explorer.messages import get_message
from open_in_explorer.platforms import PlatformHandler, PlatformTag, get_platform_handler
from open_in_explorer.sanitizer import is_empty_path, sanitize
from open_in_explorer.symlinks import SymlinkChoice, resolve_symlink

logger = get_logger(__name__)

_NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR})


class RunState(Enum):
    """States of a single pipeline run."""

    START = "start"
    SANITIZED = "sanitized"
    VALIDATED = "validated"
    STATED = "stated"
    SYMLINK_RESOLVED = "symlink_resolved"
    CLASSIFIED = "classified"
    DISPATCHED = "dispatched"
    OPENED_IN_EDITOR = "opened_in_editor"
    CANCELLED = "cancelled"
    FAILED = "failed"


class LargeFileChoice(Enum):
    """User decision for a text file at or above the size limit."""

    OPEN = "open"
    REVEAL = "reveal"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ResolvedTarget:
    """Filesystem metadata of the entry a run acts on."""

    path: str
    is_file: bool
    is_dir: bool
    size: int
    is_symlink: bool = False

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1]


@dataclass
class RunOutcome:
    """How a run ended.

    Attributes:
        state: Terminal state (DISPATCHED, OPENED_IN_EDITOR, CANCELLED or FAILED)
        path: Path that was acted on, once known
        error: The error that ended the run in FAILED
        message: Localized message shown to the user for a failure
        classification: Content class, if the file was classified
        dispatch: Result of the file manager command, if one ran
        state_history: Every state the run passed through, in order
    """

    state: RunState
    path: Optional[str] = None
    error: Optional[OpenInExplorerError] = None
    message: Optional[str] = None
    classification: Optional[Classification] = None
    dispatch: Optional[DispatchResult] = None
    state_history: list[RunState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is not RunState.FAILED


class Prompter(Protocol):
    """User interaction points of a run. Each prompt may return None on dismissal."""

    async def choose_symlink(self, path: str, target: str) -> Optional[SymlinkChoice]: ...

    async def confirm_large_file(self, path: str, size: int) -> Optional[LargeFileChoice]: ...

    def show_error(self, message: str) -> None: ...


class EditorOpener(Protocol):
    """Opens a file as a text document in the editor."""

    async def open_text(self, path: str, beside: bool = False) -> None: ...


def probe_path(path: str) -> ResolvedTarget:
    """Stat ``path`` (following links) and record whether it is a link itself."""
    link_stat = os.lstat(path)
    is_symlink = stat.S_ISLNK(link_stat.st_mode)
    st = os.stat(path) if is_symlink else link_stat
    return ResolvedTarget(
        path=path,
        is_file=stat.S_ISREG(st.st_mode),
        is_dir=stat.S_ISDIR(st.st_mode),
        size=st.st_size,
        is_symlink=is_symlink,
    )


class PathOpener:
    """Runs the open-in-explorer pipeline against injected collaborators."""

    def __init__(
        self,
        editor: EditorOpener,
        prompter: Prompter,
        config_loader: Callable[[], ExplorerConfig] = load_config,
        platform: Union[PlatformTag, str, None] = None,
        runner: CommandRunner = run_shell_command,
        base_dir: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            editor: Editor collaborator that opens text files
            prompter: Asks the user for decisions and shows errors
            config_loader: Returns a fresh settings snapshot, called once per run
            platform: Platform to act for. If None, uses the running OS
            runner: Coroutine executing file manager command lines
            base_dir: Directory relative paths are resolved against (default: cwd)
        """
        self.editor = editor
        self.prompter = prompter
        self.config_loader = config_loader
        self.platform = platform
        self.runner = runner
        self.base_dir = base_dir

    async def run(self, raw: str, beside: bool = False) -> RunOutcome:
        """
        Resolve selected text to a path and open or reveal it.

        Args:
            raw: Untrusted selected text
            beside: Open text files beside the active editor view

        Returns:
            RunOutcome with the terminal state; errors are reported, not raised
        """
        config = self.config_loader()
        outcome = RunOutcome(state=RunState.START, state_history=[RunState.START])

        try:
            await self._run(raw, beside, config, outcome)
        except OpenInExplorerError as e:
            logger.info("Run failed: %s", e)
            outcome.error = e
            outcome.message = get_message(e.message_key, config.language, detail=e.detail)
            self._advance(outcome, RunState.FAILED)
            self.prompter.show_error(outcome.message)

        return outcome

    @staticmethod
    def _advance(outcome: RunOutcome, state: RunState) -> None:
        outcome.state = state
        outcome.state_history.append(state)

    async def _run(
        self, raw: str, beside: bool, config: ExplorerConfig, outcome: RunOutcome
    ) -> None:
        handler = get_platform_handler(self.platform)

        sanitized = sanitize(raw, handler.pathmod)
        if is_empty_path(sanitized):
            raise InvalidInputError("Selection does not contain a path")
        self._advance(outcome, RunState.SANITIZED)

        reason = handler.validate(sanitized, config.allow_relative_paths)
        if reason is not None:
            raise InvalidPathGrammarError(
                "Path rejected by platform validator",
                platform=handler.tag.value,
                path=sanitized,
                message_key=reason,
            )
        self._advance(outcome, RunState.VALIDATED)

        path = self._absolute(handler.normalize(sanitized), handler)
        outcome.path = path

        target = await self._probe(path)
        self._advance(outcome, RunState.STATED)

        if target.is_symlink:
            resolved = await resolve_symlink(path, config, self.prompter.choose_symlink)
            if resolved != path:
                target = await self._probe(resolved)
                outcome.path = resolved
            self._advance(outcome, RunState.SYMLINK_RESOLVED)

        # Only regular files are classified; FIFOs, sockets and devices are revealed
        if not target.is_file or not target.extension:
            await self._dispatch(target, handler, config, outcome)
            return

        classification = await classify(target.path, config.text_file_scan_bytes)
        outcome.classification = classification
        self._advance(outcome, RunState.CLASSIFIED)

        if classification is Classification.BINARY:
            await self._dispatch(target, handler, config, outcome)
            return

        if config.confirm_large_file_open and target.size >= config.large_file_size_limit:
            choice = await self.prompter.confirm_large_file(target.path, target.size)
            if choice is LargeFileChoice.REVEAL:
                await self._dispatch(target, handler, config, outcome)
                return
            if choice is not LargeFileChoice.OPEN:
                logger.info("Opening of large file %s cancelled", target.path)
                self._advance(outcome, RunState.CANCELLED)
                return

        await self._open_in_editor(target, beside, outcome)

    def _absolute(self, path: str, handler: PlatformHandler) -> str:
        """Anchor an (allowed) relative path at base_dir."""
        if handler.pathmod.isabs(path):
            return path
        base = str(self.base_dir) if self.base_dir is not None else os.getcwd()
        return handler.normalize(handler.pathmod.join(base, path))

    @staticmethod
    async def _probe(path: str) -> ResolvedTarget:
        try:
            return await asyncio.to_thread(probe_path, path)
        except OSError as e:
            if e.errno in _NOT_FOUND_ERRNOS:
                raise PathNotFoundError("Path does not exist", path=path) from e
            raise StatError("Could not stat path", path=path, detail=e.strerror or str(e)) from e
        except ValueError as e:
            raise StatError("Could not stat path", path=path, detail=str(e)) from e

    async def _dispatch(
        self,
        target: ResolvedTarget,
        handler: PlatformHandler,
        config: ExplorerConfig,
        outcome: RunOutcome,
    ) -> None:
        result = await reveal(
            target.path,
            not target.is_dir,
            handler,
            custom_command=config.custom_explorer_for(handler.tag),
            runner=self.runner,
        )
        outcome.dispatch = result
        if not result.success:
            raise DispatchError(
                result.error or "File manager command failed",
                command=result.command,
                exit_code=result.exit_code,
                stderr=result.stderr or None,
            )
        self._advance(outcome, RunState.DISPATCHED)

    async def _open_in_editor(
        self, target: ResolvedTarget, beside: bool, outcome: RunOutcome
    ) -> None:
        try:
            await self.editor.open_text(target.path, beside=beside)
        except Exception as e:  # noqa: generic-exception
            raise EditorOpenError(
                "Editor failed to open file", path=target.path, detail=str(e)
            ) from e
        logger.info("Opened %s in editor", target.path)
        self._advance(outcome, RunState.OPENED_IN_EDITOR)
