#!/usr/bin/env python3
"""
open-in-explorer - command line entry point

Takes a selected path (argument or stdin), then opens text files in $EDITOR
and reveals everything else in the native file manager.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional, TypeVar

import click

from open_in_explorer.__version__ import __version__
from open_in_explorer.config import load_config
from open_in_explorer.logging_config import APP_NAME, get_logger, set_console_level
from open_in_explorer.messages import get_message
from open_in_explorer.opener import LargeFileChoice, PathOpener
from open_in_explorer.symlinks import SymlinkChoice

logger = get_logger(__name__)

T = TypeVar("T")


class ClickPrompter:
    """Terminal prompts for the user decisions of a run.

    Prompts run on the main thread, where Ctrl-C reaches click.prompt and
    dismisses the question.
    """

    def __init__(self, language: str):
        self.language = language

    def _choose(self, question: str, options: list[tuple[str, T]]) -> Optional[T]:
        click.echo(question, err=True)
        for number, (label, _) in enumerate(options, start=1):
            click.echo(f"  {number}) {label}", err=True)
        try:
            answer = click.prompt(">", type=click.IntRange(1, len(options)), err=True)
        except click.Abort:
            # Ctrl-C or end of input dismisses the prompt
            click.echo("", err=True)
            return None
        return options[answer - 1][1]

    async def choose_symlink(self, path: str, target: str) -> Optional[SymlinkChoice]:
        question = get_message("symlink_prompt", self.language, path=path, target=target)
        options = [
            (get_message("symlink_follow", self.language), SymlinkChoice.FOLLOW),
            (get_message("symlink_open_link", self.language), SymlinkChoice.OPEN_LINK),
        ]
        return self._choose(question, options)

    async def confirm_large_file(self, path: str, size: int) -> Optional[LargeFileChoice]:
        question = get_message("large_file_prompt", self.language, path=path, size=size)
        options = [
            (get_message("large_file_open", self.language), LargeFileChoice.OPEN),
            (get_message("large_file_reveal", self.language), LargeFileChoice.REVEAL),
            (get_message("large_file_cancel", self.language), LargeFileChoice.CANCEL),
        ]
        return self._choose(question, options)

    def show_error(self, message: str) -> None:
        click.secho(message, fg="red", err=True)


class ClickEditor:
    """Opens text files in $EDITOR, or beside the terminal in the default app."""

    async def open_text(self, path: str, beside: bool = False) -> None:
        if beside:
            returncode = await asyncio.to_thread(click.launch, path, wait=False)
            if returncode != 0:
                raise click.ClickException(f"Default application exited with status {returncode}")
            return
        await asyncio.to_thread(click.edit, filename=path)


def _read_selection(text: Optional[str]) -> str:
    if text is not None:
        return text
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return click.get_text_stream("stdin").read()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("text", required=False)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (TOML). Defaults to the per-user application directory.",
)
@click.option("--beside", is_flag=True, help="Open text files beside the active view.")
@click.option("--debug", is_flag=True, help="Show debug logging on the console.")
@click.version_option(__version__, prog_name=APP_NAME)
def cli(text: Optional[str], config_path: Optional[Path], beside: bool, debug: bool) -> None:
    """Open TEXT as a path: text files in the editor, everything else in the file manager.

    TEXT is read from standard input when omitted.
    """
    if debug:
        set_console_level("DEBUG")

    selection = _read_selection(text)

    # A CLI invocation is a single run, so the snapshot is loaded exactly once
    config = load_config(config_path)
    opener = PathOpener(
        editor=ClickEditor(),
        prompter=ClickPrompter(config.language),
        config_loader=lambda: config,
    )
    outcome = asyncio.run(opener.run(selection, beside=beside))
    logger.debug("Run finished in state %s", outcome.state.value)

    if not outcome.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    cli()
