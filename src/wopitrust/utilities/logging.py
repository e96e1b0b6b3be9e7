"""Logging for wopitrust.

Modules log through ``get_logger``. The package configures the ``wopitrust``
logger once at import when ``settings.log_enabled`` is set; embedding
applications that manage logging themselves turn that off and attach their
own handlers.
"""

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the wopitrust namespace.

    Args:
        name: the name of the logger, which will be prefixed with 'wopitrust.'

    Returns:
        a configured logger instance
    """
    if name.startswith("wopitrust."):
        return logging.getLogger(name=name)

    return logging.getLogger(name=f"wopitrust.{name}")


def _has_traceback(record: logging.LogRecord) -> bool:
    return record.exc_info is not None


def _message_handler() -> RichHandler:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.addFilter(lambda record: not _has_traceback(record))
    return handler


def _traceback_handler(rich_tracebacks: bool) -> RichHandler:
    # Lookup failures surface through httpx and pydantic frames; only the
    # caller's frames are worth showing
    import httpx
    import pydantic

    import wopitrust

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_level=False,
        rich_tracebacks=rich_tracebacks,
        tracebacks_max_frames=3,
        tracebacks_suppress=[wopitrust, httpx, pydantic],
    )
    handler.addFilter(_has_traceback)
    return handler


def configure_logging(
    level: LogLevel | int = "INFO",
    logger: logging.Logger | None = None,
    enable_rich_tracebacks: bool = True,
) -> None:
    """Send wopitrust logs to stderr through rich.

    Records without an exception and records with one go to separate
    handlers, the latter rendering a short traceback. Calling this again
    replaces the handlers installed by the previous call.

    Args:
        level: the log level to use
        logger: the logger to configure, defaults to the ``wopitrust`` logger
        enable_rich_tracebacks: render tracebacks with rich instead of plain text
    """
    if logger is None:
        logger = logging.getLogger("wopitrust")

    logger.propagate = False
    logger.setLevel(level)

    formatter = logging.Formatter("%(message)s")
    handlers = [_message_handler(), _traceback_handler(enable_rich_tracebacks)]

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
