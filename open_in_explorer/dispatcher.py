"""
Build and run the command that reveals a path in the native file manager.

Path arguments are always quoted for the target shell before they are put
into a command line. Custom file manager commands from the settings are
additionally checked against a denylist of shell metacharacters and
dangerous program names, and are never executed when they match.
"""

from __future__ import annotations

import asyncio
import posixpath
import re
import tempfile
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from open_in_explorer.exceptions import DangerousCommandError
from open_in_explorer.logging_config import get_logger

if TYPE_CHECKING:
    from open_in_explorer.platforms import PlatformHandler

logger = get_logger(__name__)

DANGEROUS_CHARACTERS = (";", "&", "|", ">", "<", "$", "`", "\n", "\r")

DANGEROUS_COMMANDS = frozenset(
    {
        # Shells and interpreters
        "sh",
        "bash",
        "zsh",
        "fish",
        "csh",
        "tcsh",
        "ksh",
        "dash",
        "cmd",
        "powershell",
        "pwsh",
        "wscript",
        "cscript",
        "python",
        "python3",
        "perl",
        "ruby",
        "node",
        "eval",
        "exec",
        # Network tools
        "curl",
        "wget",
        "nc",
        "ncat",
        "netcat",
        "telnet",
        "ssh",
        "scp",
        "sftp",
        "ftp",
        "rsync",
        # Destructive or privileged commands
        "rm",
        "rmdir",
        "del",
        "erase",
        "rd",
        "format",
        "mkfs",
        "dd",
        "shred",
        "shutdown",
        "reboot",
        "halt",
        "poweroff",
        "sudo",
        "su",
        "doas",
        "runas",
        "chmod",
        "chown",
        "kill",
        "killall",
        "reg",
    }
)

_TOKEN_SPLIT_RE = re.compile(r"[\s\"',=]+")
_EXECUTABLE_SUFFIX_RE = re.compile(r"\.(exe|com|bat|cmd|ps1|sh)$", re.IGNORECASE)


@dataclass
class CommandOutput:
    """Captured result of an executed command line."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


@dataclass
class DispatchResult:
    """Result of a reveal operation.

    Attributes:
        success: Whether the file manager command completed without error
        command: The command line that was executed
        stderr: Captured standard error text
        error: Error description if the operation failed
        exit_code: Process exit code, if the process ran
    """

    success: bool
    command: str
    stderr: str = ""
    error: Optional[str] = None
    exit_code: Optional[int] = None


CommandRunner = Callable[[str], Awaitable[CommandOutput]]


def _program_name(token: str) -> str:
    name = re.split(r"[\\/]", token)[-1].lower()
    return _EXECUTABLE_SUFFIX_RE.sub("", name)


def find_dangerous_token(command: str) -> Optional[str]:
    """Return the first denylisted character or program name in a command."""
    for char in DANGEROUS_CHARACTERS:
        if char in command:
            return char
    for token in _TOKEN_SPLIT_RE.split(command):
        if token and _program_name(token) in DANGEROUS_COMMANDS:
            return token
    return None


def check_custom_command(command: str) -> None:
    """Raise DangerousCommandError if a custom command matches the denylist."""
    matched = find_dangerous_token(command)
    if matched is not None:
        raise DangerousCommandError(
            "Custom explorer command rejected",
            command=command,
            matched=matched.strip() or repr(matched),
        )


def quote_windows_argument(arg: str) -> str:
    """Wrap an argument in double quotes, doubling embedded quotes."""
    return '"' + arg.replace('"', '""') + '"'


def quote_posix_argument(arg: str) -> str:
    """Wrap an argument in single quotes, writing embedded quotes as '\\''."""
    return "'" + arg.replace("'", "'\\''") + "'"


def windows_reveal_command(path: str, is_file: bool) -> str:
    """explorer.exe selecting a file, or opening a directory."""
    quoted = quote_windows_argument(path)
    if is_file:
        return f"explorer.exe /select,{quoted}"
    return f"explorer.exe {quoted}"


def macos_reveal_command(path: str, is_file: bool) -> str:
    """Finder revealing a file, or opening a directory."""
    quoted = quote_posix_argument(path)
    if is_file:
        return f"open -R {quoted}"
    return f"open {quoted}"


def linux_reveal_command(path: str, is_file: bool) -> str:
    """xdg-open on a directory, or on the directory containing a file.

    Linux file managers share no flag for selecting a file, so files are
    revealed by opening their parent directory.
    """
    target = (posixpath.dirname(path.rstrip("/")) or "/") if is_file else path
    return f"xdg-open {quote_posix_argument(target)}"


def custom_reveal_command(custom_command: str, path: str, quote: Callable[[str], str]) -> str:
    """Append the quoted path to a custom file manager command."""
    return f"{custom_command} {quote(path)}"


async def run_shell_command(command: str) -> CommandOutput:
    """
    Execute a command line through the system shell and capture its output.

    Output goes to temporary files rather than pipes: a file manager started
    by the command inherits the handles and may keep them open long after the
    command itself has exited.

    Args:
        command: Command line with every argument already quoted

    Returns:
        CommandOutput with exit status and decoded stdout/stderr

    Raises:
        OSError: If the shell could not be started
    """
    with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=out,
            stderr=err,
        )
        returncode = await process.wait()

        out.seek(0)
        err.seek(0)
        return CommandOutput(
            returncode=returncode,
            stdout=out.read().decode(errors="replace"),
            stderr=err.read().decode(errors="replace"),
        )


async def reveal(
    path: str,
    is_file: bool,
    handler: PlatformHandler,
    custom_command: str = "",
    runner: CommandRunner = run_shell_command,
) -> DispatchResult:
    """
    Reveal a path in the file manager of the handler's platform.

    Args:
        path: Normalized absolute path to reveal
        is_file: True to select a file, False to open a directory
        handler: Platform handler that builds and quotes the command
        custom_command: Configured custom file manager command ("" = built-in)
        runner: Coroutine executing a command line

    Returns:
        DispatchResult describing the outcome

    Raises:
        DangerousCommandError: If custom_command matches the denylist
    """
    custom_command = custom_command.strip()
    if custom_command:
        check_custom_command(custom_command)
        command = custom_reveal_command(custom_command, path, handler.quote)
        ignore_exit_status = False
    else:
        command = handler.reveal_command(path, is_file)
        ignore_exit_status = handler.ignore_exit_status

    logger.info("Revealing %s with: %s", path, command)

    try:
        output = await runner(command)
    except OSError as e:
        logger.error("Failed to start file manager command %r: %s", command, e)
        return DispatchResult(success=False, command=command, error=str(e))

    stderr = output.stderr.strip()
    if stderr:
        logger.error("File manager command wrote to stderr: %s", stderr)
        return DispatchResult(
            success=False,
            command=command,
            stderr=stderr,
            error=stderr,
            exit_code=output.returncode,
        )

    if output.returncode != 0 and not ignore_exit_status:
        logger.error("File manager command exited with status %d", output.returncode)
        return DispatchResult(
            success=False,
            command=command,
            error=f"exit status {output.returncode}",
            exit_code=output.returncode,
        )

    return DispatchResult(success=True, command=command, exit_code=output.returncode)
