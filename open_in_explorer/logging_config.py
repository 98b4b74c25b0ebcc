"""
Centralized logging configuration for open-in-explorer.

It offers:
- Rotating file logs (10MB max, 5 backups) for detailed troubleshooting
- Console output on stderr for user-facing diagnostics (WARNING+ by default)
- Per-module loggers with consistent formatting

Usage:
    from open_in_explorer.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Revealed %s", path)
    logger.error("Failed to open", exc_info=True)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import click

APP_NAME = "open-in-explorer"

# Global flag to track if logging is initialized
_logging_initialized = False


def default_log_file() -> Path:
    """Return the default log file inside the per-user application directory."""
    return Path(click.get_app_dir(APP_NAME)) / "logs" / f"{APP_NAME}.log"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 5,
    console_level: str = "WARNING",
) -> None:
    """
    Configure the root logger with file and console handlers.

    This should be called once at startup. Subsequent calls are ignored to
    prevent duplicate handlers. When the log directory cannot be created the
    file handler is skipped and only console logging is configured.

    Args:
        log_level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file. If None, uses the application directory
        max_bytes: Maximum size of log file before rotation (default: 10MB)
        backup_count: Number of backup log files to keep (default: 5)
        console_level: Minimum level for console output (default: WARNING)
    """
    global _logging_initialized

    if _logging_initialized:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter in handlers
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter(fmt="%(levelname)s: %(message)s")

    log_file = Path(log_file) if log_file is not None else default_log_file()

    file_handler = None
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        sys.stderr.write(f"Log file unavailable ({log_file}): {exc}\n")

    if file_handler is not None:
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # Console goes to stderr so stdout stays clean for scripting
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    _logging_initialized = True

    root_logger.info(
        "Logging initialized: file=%s (level=%s), console (level=%s)",
        log_file if file_handler is not None else None,
        log_level,
        console_level,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance configured with the application's settings
    """
    if not _logging_initialized:
        setup_logging()

    return logging.getLogger(name)


def set_console_level(level: str) -> None:
    """Change the level of the console handler(s) after setup."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, RotatingFileHandler
        ):
            handler.setLevel(getattr(logging, level.upper()))


def reset_logging() -> None:
    """
    Reset logging configuration (primarily for testing).

    This clears all handlers and resets the initialization flag,
    allowing setup_logging() to be called again.
    """
    global _logging_initialized

    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    root_logger.setLevel(logging.WARNING)
    _logging_initialized = False
