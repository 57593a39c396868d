"""Logging setup driven by the VERBOSITY level.

Library modules only create named loggers under ``sitespine``; this
module attaches a Rich handler to that namespace when a build asks for it.

Example:
    >>> import logging
    >>> from sitespine.core.logging import verbosity_to_level
    >>> verbosity_to_level(1) == logging.INFO
    True
    >>> verbosity_to_level(3) == logging.DEBUG
    True
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "sitespine"

# Levels above CRITICAL silence the namespace entirely.
SILENT = logging.CRITICAL + 10


def verbosity_to_level(verbosity: int) -> int:
    """Map a 0-5 verbosity to a logging level."""
    if verbosity <= 0:
        return SILENT
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int, console: Console | None = None) -> logging.Logger:
    """Install (or replace) the Rich handler on the ``sitespine`` logger.

    Args:
        verbosity: 0 (silent) to 5.
        console: Console to write to (default: stderr console).

    Returns:
        The configured namespace logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_sitespine_handler", False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler._sitespine_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(verbosity_to_level(verbosity))
    return logger
