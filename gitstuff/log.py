"""Logging setup for the gitstuff CLI.

The ``-v`` count is mapped to a level once per invocation. Nothing reads a
global verbosity afterwards: display code receives the count as an argument.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG, TRACE]

_logger = logging.getLogger("gitstuff")


def level_from_count(count: int) -> int:
    """Map a ``-v`` count (clamped to 0..3) to a logging level."""
    count = max(0, min(count, len(_LEVELS) - 1))
    return _LEVELS[count]


def configure_logging(
    verbosity: int = 0,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a stderr handler to the ``gitstuff`` logger at the given verbosity."""
    level = level_from_count(verbosity)

    if handler is None:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=level <= logging.DEBUG,
        )

    for existing in list(_logger.handlers):
        _logger.removeHandler(existing)

    handler.setLevel(level)
    _logger.addHandler(handler)
    _logger.setLevel(level)
    _logger.propagate = False
