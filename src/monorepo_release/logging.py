"""Logging setup shared by all modules.

Messages go through the standard :mod:`logging` machinery and are rendered
by a :class:`rich.logging.RichHandler` on a shared console.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "monorepo_release"

console = Console()
err_console = Console(stderr=True)


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(
    verbose: bool = False, *, log_console: Console | None = None
) -> logging.Logger:
    """Configure the package logger.

    Args:
        verbose: Emit DEBUG messages when True, INFO otherwise
        log_console: Console to render to (defaults to the shared console)

    Returns:
        The configured package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=log_console or console,
        show_time=False,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
