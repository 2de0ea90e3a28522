"""
Logging for tempo.

Every logger lives under the ``tempo`` root. Loader stages report progress
at INFO; command lines and the captured output of git, pip and the build
tools are logged at DEBUG so ``tempo -v`` shows what ran.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from tempo.errors import ConfigError

_root_logger = logging.getLogger("tempo")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _to_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ConfigError(f"unknown log level: {level}")
    return value


def setup_logging(
    level: str | int = "WARNING",
    stream: TextIO | None = None,
    file: str | None = None,
    rich: bool = False,
) -> None:
    """
    Configure the ``tempo`` logger, replacing any handlers set up before.

    Args:
        level: Level name (DEBUG, INFO, ...) or number
        stream: Plain-text output stream (defaults to stderr)
        file: Optional file that receives the same records
        rich: Render records with rich on stderr instead of plain text

    Raises:
        ConfigError: If the level name is unknown

    Example:
        setup_logging("DEBUG", rich=True)
        setup_logging("INFO", file="tempo.log")
    """
    level = _to_level(level)
    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    handler: logging.Handler
    if rich:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler.setLevel(level)
    _root_logger.addHandler(handler)

    if file:
        file_handler = logging.FileHandler(file)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        file_handler.setLevel(level)
        _root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger of ``tempo``: ``get_logger("vcs")`` -> ``tempo.vcs``."""
    if name == "tempo" or name.startswith("tempo."):
        return logging.getLogger(name)
    return logging.getLogger(f"tempo.{name}")


def set_level(level: str | int) -> None:
    """Change the level of the ``tempo`` logger and its handlers."""
    level = _to_level(level)
    _root_logger.setLevel(level)
    for handler in _root_logger.handlers:
        handler.setLevel(level)


def log_tool_output(logger: logging.Logger, tool: str, output: str) -> None:
    """Log the captured output of an external tool, one DEBUG record per line."""
    if not output or not logger.isEnabledFor(logging.DEBUG):
        return
    for line in output.splitlines():
        if line.strip():
            logger.debug("[%s] %s", tool, line.rstrip())
