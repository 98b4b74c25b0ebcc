"""
Custom exceptions for open-in-explorer.

Every failure a single run can end in has its own exception type. All of them
are terminal for the run that raised them: the orchestrator logs the error,
shows a localized message to the user and finishes in the FAILED state.

Each class carries a ``message_key`` naming the entry in
``open_in_explorer.messages`` that is shown to the user.
"""

from typing import Optional


class OpenInExplorerError(Exception):
    """
    Base exception for all open-in-explorer errors.

    All custom exceptions in this package inherit from this class, so the
    orchestrator can catch every pipeline failure with one except clause while
    letting system errors (KeyboardInterrupt, SystemExit) bubble up.
    """

    message_key = "unexpected_error"
    detail = ""


class InvalidInputError(OpenInExplorerError):
    """
    Raised when the selection is empty after sanitization.

    Whitespace-only and quote-only selections end up here before any
    filesystem probe is attempted.
    """

    message_key = "no_valid_path"


class InvalidPathGrammarError(OpenInExplorerError):
    """
    Raised when a sanitized path fails the platform path grammar.

    Args:
        message: Human-readable error description
        platform: Platform tag whose validator rejected the path (optional)
        path: The rejected path (optional)
        message_key: Localized reason chosen by the platform validator
    """

    message_key = "invalid_path"

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        path: Optional[str] = None,
        message_key: Optional[str] = None,
    ):
        self.platform = platform
        self.path = path
        if message_key:
            self.message_key = message_key
        error_parts = [message]
        if platform:
            error_parts.append(f"platform: {platform}")
        if path:
            error_parts.append(f"path: {path}")
        super().__init__(" | ".join(error_parts))


class PathNotFoundError(OpenInExplorerError):
    """
    Raised when the stat probe reports that the path does not exist.

    Args:
        message: Human-readable error description
        path: The missing path (optional)
    """

    message_key = "path_not_found"

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            super().__init__(f"{message} (path: {path})")
        else:
            super().__init__(message)


class StatError(OpenInExplorerError):
    """
    Raised when the stat probe fails for any reason other than "not found".

    Typical causes are permission errors, I/O errors on network shares and
    paths that are too long for the platform.

    Args:
        message: Human-readable error description
        path: The path that was probed (optional)
        detail: Underlying OS error text shown to the user (optional)
    """

    message_key = "stat_error"

    def __init__(self, message: str, path: Optional[str] = None, detail: Optional[str] = None):
        self.path = path
        self.detail = detail or ""
        if path:
            super().__init__(f"{message} (path: {path})")
        else:
            super().__init__(message)


class EditorOpenError(OpenInExplorerError):
    """
    Raised when the editor collaborator fails to open a text file.

    Args:
        message: Human-readable error description
        path: The file that could not be opened (optional)
        detail: Editor error text shown to the user (optional)
    """

    message_key = "editor_open_error"

    def __init__(self, message: str, path: Optional[str] = None, detail: Optional[str] = None):
        self.path = path
        self.detail = detail or ""
        if path:
            super().__init__(f"{message} (path: {path})")
        else:
            super().__init__(message)


class UnsupportedPlatformError(OpenInExplorerError):
    """
    Raised when no path validator or file manager is known for the host OS.

    Args:
        message: Human-readable error description
        platform: The unrecognized platform identifier (optional)
    """

    message_key = "unsupported_platform"

    def __init__(self, message: str, platform: Optional[str] = None):
        self.platform = platform
        self.detail = platform or ""
        if platform:
            super().__init__(f"{message} (platform: {platform})")
        else:
            super().__init__(message)


class DangerousCommandError(OpenInExplorerError):
    """
    Raised when a custom explorer command matches the command denylist.

    The command is never executed.

    Args:
        message: Human-readable error description
        command: The rejected custom command (optional)
        matched: The denylisted token or character that matched (optional)
    """

    message_key = "dangerous_command"

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        matched: Optional[str] = None,
    ):
        self.command = command
        self.matched = matched
        self.detail = matched or ""
        error_parts = [message]
        if command:
            error_parts.append(f"command: {command}")
        if matched:
            error_parts.append(f"matched: {matched}")
        super().__init__(" | ".join(error_parts))


class DispatchError(OpenInExplorerError):
    """
    Raised when the file manager command fails.

    This covers commands that could not be started, commands that exit with
    an error status and commands that write to standard error.

    Args:
        message: Human-readable error description, also shown to the user
        command: The command line that was executed (optional)
        exit_code: Process exit code (optional)
        stderr: Captured standard error text (optional)
    """

    message_key = "dispatch_error"

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.detail = message
        error_parts = [message]
        if command:
            error_parts.append(f"command: {command}")
        if exit_code is not None:
            error_parts.append(f"exit code: {exit_code}")
        if stderr:
            error_parts.append(f"stderr: {stderr}")
        super().__init__(" | ".join(error_parts))
