"""
Basic logging configuration for the catalog.

The ``setup_logging`` function configures the root logger with a
console and an optional file handler.  Log format includes the
timestamp, logger name, log level and message.  This module ensures
that logging is set up exactly once.

``log_calls`` is a small decorator used by the service layer to trace
calls at DEBUG level.  It never alters the outcome of the wrapped call:
exceptions are logged and re-raised unchanged.
"""

import functools
import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from .exceptions import CatalogError

F = TypeVar("F", bound=Callable[..., Any])


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure root logger.

    If no handlers are attached to the root logger, attach a
    console handler and optionally a file handler.  The root
    logger's level is set based on the provided ``level``.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[str]
        Path to a file to log messages to.  If omitted, no file
        handler is added.  Paths are resolved relative to the
        current working directory.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Avoid configuring logging multiple times.  This happens in
        # tests or when ``create_catalog`` is called repeatedly.
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def log_calls(func: F) -> F:
    """Trace entry, exit and failures of a service method.

    Entry and exit are logged at DEBUG with the qualified name of the
    callable.  Failures are logged together with the exception type
    (WARNING for catalog errors, ERROR otherwise) and then propagate as
    they are.
    """
    logger = logging.getLogger(func.__module__)
    name = func.__qualname__

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if logger.isEnabledFor(logging.DEBUG):
            # Skip ``self`` so the service instance repr does not flood the log
            logger.debug("==> %s() args=%r kwargs=%r", name, args[1:], kwargs)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            # Domain errors (not found, invalid input) are expected outcomes
            level = logging.WARNING if isinstance(exc, CatalogError) else logging.ERROR
            logger.log(level, "Error in %s(): %s", name, type(exc).__name__)
            raise
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("<== %s() result=%r", name, result)
        return result

    return wrapper  # type: ignore[return-value]
