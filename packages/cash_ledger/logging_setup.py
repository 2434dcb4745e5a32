"""Logging for ``cash_ledger``.

Every module logs through a child of the ``cash_ledger`` logger obtained with
:func:`get_logger`. Nothing is printed until an entrypoint (the CLI root
callback, or a host application) calls :func:`configure_logging`, which puts
one stream handler on the package logger. The level comes from the caller,
else from ``CASH_LEDGER_LOG_LEVEL``, else INFO.

Messages are written as ``topic:event key=value ...`` so store failures,
loader drops and session saves can be grepped by topic.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "cash_ledger"
LOG_LEVEL_ENV = "CASH_LEDGER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"

# The handler installed by configure_logging, if any
_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a level number.

    ``None`` reads :data:`LOG_LEVEL_ENV`. Unknown names fall back to INFO.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging`."""

    global _handler
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        pkg.removeHandler(_handler)
        _handler = None
    pkg.propagate = True
    pkg.setLevel(logging.NOTSET)


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] | None = None,
    fmt: str = DEFAULT_FORMAT,
    force: bool = False,
) -> logging.Handler:
    """Attach the package's stream handler and return it.

    A second call is a no-op returning the existing handler, unless ``force``
    is set, in which case the handler is rebuilt with the new settings.
    """

    global _handler
    if _handler is not None and not force:
        return _handler
    reset_logging()

    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in list(pkg.handlers):
        if isinstance(h, logging.NullHandler):
            pkg.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt))
    pkg.addHandler(handler)
    pkg.setLevel(resolved)
    pkg.propagate = False
    _handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``, placed under the package logger.

    Until :func:`configure_logging` runs, the package logger carries a
    ``NullHandler`` so library use stays silent.
    """

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_FORMAT",
    "LOG_LEVEL_ENV",
    "PACKAGE_LOGGER",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "resolve_level",
]
