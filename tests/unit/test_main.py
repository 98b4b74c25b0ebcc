"""
Tests for the command line entry point.

The editor and file manager are replaced with mocks; everything else (config
loading, validation, stat, classification) runs for real.
"""

import asyncio
import threading
from unittest import mock

import click
import pytest
from click.testing import CliRunner

from open_in_explorer.__version__ import __version__
from open_in_explorer.dispatcher import DispatchResult
from open_in_explorer.main import ClickEditor, ClickPrompter, cli
from open_in_explorer.opener import LargeFileChoice
from open_in_explorer.symlinks import SymlinkChoice


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """English settings with a tiny large-file limit."""
    path = tmp_path / "settings.toml"
    path.write_text(
        '[openInExplorer]\nlanguage = "en"\nlargeFileSizeLimit = 1000\n', encoding="utf-8"
    )
    return path


@pytest.fixture
def mock_edit(mocker):
    return mocker.patch("open_in_explorer.main.click.edit")


@pytest.fixture
def mock_reveal(mocker):
    return mocker.patch(
        "open_in_explorer.opener.reveal",
        new=mock.AsyncMock(return_value=DispatchResult(success=True, command="reveal")),
    )


@pytest.mark.unit
class TestCli:
    """Tests for the open-in-explorer command."""

    def test_version(self, runner):
        """Test that --version prints the package version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_text_file_opens_in_editor(self, runner, text_file, config_file, mock_edit):
        """Test that a text file is opened with click.edit."""
        result = runner.invoke(cli, [str(text_file), "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        mock_edit.assert_called_once_with(filename=str(text_file))

    def test_selection_read_from_stdin(self, runner, text_file, config_file, mock_edit):
        """Test that the selection is read from stdin when no argument is given."""
        result = runner.invoke(cli, ["--config", str(config_file)], input=f"  {text_file}\n")

        assert result.exit_code == 0, result.output
        mock_edit.assert_called_once_with(filename=str(text_file))

    def test_empty_selection_fails(self, runner, config_file):
        """Test that an empty selection exits with status 1."""
        result = runner.invoke(cli, ["--config", str(config_file)], input="")

        assert result.exit_code == 1
        assert "Please select a valid file path." in result.output

    def test_default_language_is_japanese(self, runner, tmp_path):
        """Test that messages are Japanese without a language setting."""
        missing = str(tmp_path / "missing.txt")
        result = runner.invoke(cli, [missing, "--config", str(tmp_path / "x")])

        assert result.exit_code == 1
        assert "指定されたパスは存在しません。" in result.output

    def test_directory_is_revealed(self, runner, tmp_path, mock_reveal, mock_edit):
        """Test that a directory is revealed with the configured custom command."""
        config = tmp_path / "settings.toml"
        config.write_text(
            'customExplorerWindows = "nemo"\n'
            'customExplorerMacOS = "nemo"\n'
            'customExplorerLinux = "nemo"\n',
            encoding="utf-8",
        )

        result = runner.invoke(cli, [str(tmp_path), "--config", str(config)])

        assert result.exit_code == 0, result.output
        mock_reveal.assert_awaited_once()
        assert mock_reveal.await_args.kwargs["custom_command"] == "nemo"
        mock_edit.assert_not_called()

    def test_dispatch_failure_exits_nonzero(self, runner, tmp_path, config_file, mocker):
        """Test that a failed file manager command exits with status 1."""
        mocker.patch(
            "open_in_explorer.opener.reveal",
            new=mock.AsyncMock(
                return_value=DispatchResult(success=False, command="x", error="no handler")
            ),
        )

        result = runner.invoke(cli, [str(tmp_path), "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Failed to launch the file manager: no handler" in result.output

    def test_large_file_cancel_is_not_a_failure(self, runner, tmp_path, config_file, mock_edit):
        """Test that cancelling at the large-file prompt exits with status 0."""
        big = tmp_path / "big.txt"
        big.write_text("x" * 2000)

        result = runner.invoke(cli, [str(big), "--config", str(config_file)], input="3\n")

        assert result.exit_code == 0, result.output
        assert "is a large file (2000 bytes)" in result.output
        mock_edit.assert_not_called()

    def test_large_file_open_normally(self, runner, tmp_path, config_file, mock_edit):
        """Test that choosing "open normally" opens a large file in the editor."""
        big = tmp_path / "big.txt"
        big.write_text("x" * 2000)

        result = runner.invoke(cli, [str(big), "--config", str(config_file)], input="1\n")

        assert result.exit_code == 0, result.output
        mock_edit.assert_called_once_with(filename=str(big))

    def test_large_file_prompt_interrupted_cancels(
        self, runner, tmp_path, config_file, mocker, mock_edit
    ):
        """Test that Ctrl-C at the large-file prompt cancels the run cleanly."""
        big = tmp_path / "big.txt"
        big.write_text("x" * 2000)
        mocker.patch("open_in_explorer.main.click.prompt", side_effect=click.Abort())

        result = runner.invoke(cli, [str(big), "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        mock_edit.assert_not_called()

    def test_large_file_prompt_end_of_input_cancels(
        self, runner, tmp_path, config_file, mock_edit
    ):
        """Test that end of input at the large-file prompt cancels the run."""
        big = tmp_path / "big.txt"
        big.write_text("x" * 2000)

        result = runner.invoke(cli, [str(big), "--config", str(config_file)], input="")

        assert result.exit_code == 0, result.output
        mock_edit.assert_not_called()

    def test_beside_launches_default_app(self, runner, text_file, config_file, mocker):
        """Test that --beside opens text files with click.launch."""
        launch = mocker.patch("open_in_explorer.main.click.launch", return_value=0)

        result = runner.invoke(cli, [str(text_file), "--beside", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        launch.assert_called_once_with(str(text_file), wait=False)

    def test_beside_launch_failure(self, runner, text_file, config_file, mocker):
        """Test that a failing default application exits with status 1."""
        mocker.patch("open_in_explorer.main.click.launch", return_value=1)

        result = runner.invoke(cli, [str(text_file), "--beside", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "An error occurred while opening the text file" in result.output

    def test_debug_raises_console_level(self, runner, tmp_path, config_file, mocker, mock_reveal):
        """Test that --debug lowers the console level to DEBUG."""
        set_level = mocker.patch("open_in_explorer.main.set_console_level")

        runner.invoke(cli, [str(tmp_path), "--debug", "--config", str(config_file)])

        set_level.assert_called_once_with("DEBUG")


@pytest.mark.unit
class TestClickPrompter:
    """Tests for the terminal prompts."""

    def test_large_file_choices(self, mocker):
        """Test that the numbered answer maps to the large-file choice."""
        prompt = mocker.patch("open_in_explorer.main.click.prompt", return_value=2)

        choice = asyncio.run(ClickPrompter("en").confirm_large_file("/a.log", 10))

        assert choice is LargeFileChoice.REVEAL
        assert prompt.call_args.kwargs["type"].max == 3

    def test_symlink_choice(self, mocker):
        """Test that answer 1 follows the symlink."""
        mocker.patch("open_in_explorer.main.click.prompt", return_value=1)

        choice = asyncio.run(ClickPrompter("ja").choose_symlink("/link", "/target"))

        assert choice is SymlinkChoice.FOLLOW

    def test_abort_dismisses(self, mocker):
        """Test that an aborted prompt counts as dismissal."""
        mocker.patch("open_in_explorer.main.click.prompt", side_effect=click.Abort())

        choice = asyncio.run(ClickPrompter("en").choose_symlink("/link", "/target"))

        assert choice is None

    def test_prompt_runs_on_main_thread(self, mocker):
        """Test that prompts run on the main thread, where Ctrl-C is delivered."""
        threads = []

        def answer(*args, **kwargs):
            threads.append(threading.current_thread())
            return 3

        mocker.patch("open_in_explorer.main.click.prompt", side_effect=answer)

        choice = asyncio.run(ClickPrompter("en").confirm_large_file("/a.log", 10))

        assert choice is LargeFileChoice.CANCEL
        assert threads == [threading.main_thread()]

    def test_keyboard_interrupt_dismisses(self, mocker):
        """Test that Ctrl-C while reading the answer dismisses the prompt."""
        mocker.patch("click.termui.visible_prompt_func", side_effect=KeyboardInterrupt)

        choice = asyncio.run(ClickPrompter("en").confirm_large_file("/a.log", 10))

        assert choice is None

    def test_show_error_goes_to_stderr(self, capsys):
        """Test that errors are written to stderr only."""
        ClickPrompter("en").show_error("boom")

        captured = capsys.readouterr()
        assert "boom" in captured.err
        assert captured.out == ""


@pytest.mark.unit
class TestClickEditor:
    def test_edit_in_terminal_editor(self, mocker):
        """Test that text files open in the terminal editor."""
        edit = mocker.patch("open_in_explorer.main.click.edit")

        asyncio.run(ClickEditor().open_text("/a.txt"))

        edit.assert_called_once_with(filename="/a.txt")

    def test_beside_failure_raises(self, mocker):
        """Test that a non-zero click.launch status raises ClickException."""
        mocker.patch("open_in_explorer.main.click.launch", return_value=2)

        with pytest.raises(click.ClickException):
            asyncio.run(ClickEditor().open_text("/a.txt", beside=True))
