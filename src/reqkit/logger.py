"""Logger capability used by clients for diagnostics."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, Protocol

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class Logger(Protocol):
    def debug(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def warning(self, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...


def _build_nop_logger() -> logging.Logger:
    log = logging.Logger("reqkit.nop")
    log.addHandler(logging.NullHandler())
    log.disabled = True
    return log


_NOP_LOGGER = _build_nop_logger()


def nop_logger() -> logging.Logger:
    """Shared logger that discards everything."""
    return _NOP_LOGGER


def new_logger(stream: IO[str] | None = None, *, level: int = logging.DEBUG) -> logging.Logger:
    """Standalone logger writing timestamped lines to ``stream`` (stdout by default).

    The logger is not registered with the logging manager, so creating one per
    client does not leak handlers into the global hierarchy.
    """
    log = logging.Logger("reqkit", level=level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    return log
