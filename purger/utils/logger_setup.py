"""Logging for the standalone purger.

:func:`setup_logger` gives the ``purger`` logger a console handler so that
configuration errors are visible before the settings are known.
:func:`add_file_handler` then attaches a rotating log file once the access
logs are loaded.  The purger's own log file must never be one of the files
it purges, so a path that lands inside a purged access-log directory and
matches that log's pattern (directly or as a numbered backup) is refused.
"""

import os
import logging
from pathlib import Path
from typing import Iterable, Optional
from logging.handlers import RotatingFileHandler

from purger.accesslog import AccessLogDescriptor
from purger.config import PurgeConfigError
from purger.pattern import build_pattern

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Console logging for ``name``; ``level`` is a name such as ``"DEBUG"``."""
    logger = logging.getLogger(name)
    resolved = logging.getLevelName((level or "INFO").strip().upper())
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(stream)
    return logger


def check_not_purged(log_file: Path, descriptors: Iterable[AccessLogDescriptor]) -> None:
    """Raise PurgeConfigError if purging any of ``descriptors`` would delete ``log_file``."""
    log_file = Path(os.path.abspath(log_file))
    for descriptor in descriptors:
        if not descriptor.enabled:
            continue
        if log_file.parent != Path(os.path.abspath(descriptor.directory)):
            continue
        pattern = build_pattern(descriptor.prefix, descriptor.suffix)
        if pattern.fullmatch(log_file.name) or pattern.fullmatch(log_file.name + ".1"):
            raise PurgeConfigError(
                f"Log file {log_file} would be purged as an access log of {descriptor.directory}"
            )


def add_file_handler(
    logger: logging.Logger,
    log_file: str,
    descriptors: Iterable[AccessLogDescriptor] = (),
    max_bytes: int = 2_000_000,
    backup_count: int = 5,
) -> Optional[RotatingFileHandler]:
    """Attach a rotating file handler to ``logger``.

    Returns the handler, or None when the file cannot be opened; the logger
    then keeps writing to the console only.
    """
    path = Path(log_file)
    check_not_purged(path, descriptors)

    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(path):
            return handler

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as e:
        logger.warning("Cannot write log file %s (%s); logging to console only", path, e)
        return None

    handler.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(handler)
    return handler
