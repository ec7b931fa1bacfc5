"""Logging setup for fetchlayer.

The library only emits records; applications opt in to console output with
:func:`setup_logging`.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def setup_logging(
    level: int = logging.INFO,
    format_string: str = "%(message)s",
    date_format: str = "[%X]",
) -> logging.Logger:
    """Attach a RichHandler to the ``fetchlayer`` logger.

    Calling it again replaces the handler instead of stacking a second one.

    Args:
        level: Logging level for the package logger. Use ``logging.DEBUG`` to
            see dispatched requests (with sensitive headers redacted) and body
            parse fallbacks.
        format_string: Log format string. Rich renders time and level itself.
        date_format: Date format string.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("fetchlayer")
    logger.setLevel(level)

    if logger.handlers:
        logger.handlers.clear()

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt=format_string, datefmt=date_format))
    logger.addHandler(handler)

    # Records would otherwise be printed twice when the root logger has a handler.
    logger.propagate = False
    return logger
