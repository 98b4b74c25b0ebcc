"""
Pytest configuration and shared fixtures for open-in-explorer tests.

This file is automatically loaded by pytest and provides fake collaborators
(editor, prompter, command runner) so the pipeline can be exercised without a
terminal, an editor or a file manager.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

from open_in_explorer.logging_config import setup_logging

# Keep test runs out of the per-user log directory. Runs before the package
# modules create their loggers.
setup_logging(log_file=Path(tempfile.gettempdir()) / "open-in-explorer-tests" / "tests.log")

from open_in_explorer.config import ExplorerConfig  # noqa: E402
from open_in_explorer.dispatcher import CommandOutput  # noqa: E402
from open_in_explorer.opener import LargeFileChoice, PathOpener  # noqa: E402
from open_in_explorer.platforms import PlatformTag  # noqa: E402
from open_in_explorer.symlinks import SymlinkChoice  # noqa: E402

# ==================== Fake Collaborators ====================


@dataclass
class FakePrompter:
    """Prompter returning preset answers and recording every call."""

    symlink_choice: Optional[SymlinkChoice] = None
    large_file_choice: Optional[LargeFileChoice] = None
    symlink_calls: list[tuple[str, str]] = field(default_factory=list)
    large_file_calls: list[tuple[str, int]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    async def choose_symlink(self, path: str, target: str) -> Optional[SymlinkChoice]:
        self.symlink_calls.append((path, target))
        return self.symlink_choice

    async def confirm_large_file(self, path: str, size: int) -> Optional[LargeFileChoice]:
        self.large_file_calls.append((path, size))
        return self.large_file_choice

    def show_error(self, message: str) -> None:
        self.errors.append(message)


@dataclass
class FakeEditor:
    """Editor recording opened paths, optionally failing."""

    error: Optional[Exception] = None
    opened: list[tuple[str, bool]] = field(default_factory=list)

    async def open_text(self, path: str, beside: bool = False) -> None:
        if self.error is not None:
            raise self.error
        self.opened.append((path, beside))


@dataclass
class FakeRunner:
    """Command runner recording command lines instead of executing them."""

    output: CommandOutput = field(default_factory=lambda: CommandOutput(returncode=0))
    error: Optional[OSError] = None
    commands: list[str] = field(default_factory=list)

    async def __call__(self, command: str) -> CommandOutput:
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return self.output


@dataclass
class OpenerHarness:
    """A PathOpener wired to fakes, plus the fakes for assertions."""

    opener: PathOpener
    editor: FakeEditor
    prompter: FakePrompter
    runner: FakeRunner
    config_loads: list[ExplorerConfig]


# ==================== Fixtures ====================


@pytest.fixture
def fake_prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def fake_editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner():
    """Factory for runners with a preset output or start error."""
    return FakeRunner


@pytest.fixture
def make_opener(fake_editor, fake_prompter, fake_runner, tmp_path):
    """
    Build a PathOpener around the fake collaborators.

    Example:
        def test_reveal_directory(make_opener, tmp_path):
            harness = make_opener()
            outcome = asyncio.run(harness.opener.run(str(tmp_path)))
            assert harness.runner.commands
    """

    def _make(
        config: Optional[ExplorerConfig] = None,
        platform: PlatformTag = PlatformTag.LINUX,
        base_dir: Optional[Path] = None,
    ) -> OpenerHarness:
        snapshot = config or ExplorerConfig()
        loads: list[ExplorerConfig] = []

        def loader() -> ExplorerConfig:
            loads.append(snapshot)
            return snapshot

        opener = PathOpener(
            editor=fake_editor,
            prompter=fake_prompter,
            config_loader=loader,
            platform=platform,
            runner=fake_runner,
            base_dir=base_dir or tmp_path,
        )
        return OpenerHarness(opener, fake_editor, fake_prompter, fake_runner, loads)

    return _make


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    """A small UTF-8 text file with an unknown extension (forces byte sniffing)."""
    path = tmp_path / "notes.note"
    path.write_text("hello world\nsecond line\n", encoding="utf-8")
    return path


@pytest.fixture
def binary_file(tmp_path: Path) -> Path:
    """A file with an unknown extension and NUL bytes."""
    path = tmp_path / "blob.dat1"
    path.write_bytes(b"\x00\x01\x02binary\x00" * 64)
    return path


# ==================== Markers ====================


def pytest_configure(config):
    """
    Register custom pytest markers.

    This is called by pytest during initialization and allows us to define
    custom markers that can be used to categorize tests.
    """
    config.addinivalue_line("markers", "unit: Unit tests with mocked external dependencies")
    config.addinivalue_line("markers", "integration: Integration tests with real file I/O")
