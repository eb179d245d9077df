"""Logging configuration for plugin processes.

Plugins are short-lived subprocesses whose stdout may belong to the agent
(mutators write their output event there), so all diagnostics go to stderr
through a Rich handler.
"""

from __future__ import annotations

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

Verbosity = Literal["debug", "info", "warning", "error"]

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _PluginHandler(RichHandler):
    """Marker subclass so repeated setup only replaces our own handler."""


def setup_logging(verbosity: Verbosity = "warning") -> logging.Logger:
    """Configure stderr logging for the plugin process.

    Handlers installed by earlier calls are replaced; handlers installed by
    anyone else (test harnesses, host applications) are left in place.

    Args:
        verbosity: Console verbosity level (debug, info, warning, error)

    Returns:
        Configured root logger instance
    """
    log_level = _LEVELS.get(verbosity, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        if isinstance(handler, _PluginHandler):
            root_logger.removeHandler(handler)

    rich_handler = _PluginHandler(
        console=Console(stderr=True),
        show_time=False,
        show_level=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    rich_handler.setLevel(log_level)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(rich_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger for a specific module.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
