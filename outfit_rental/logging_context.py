"""Studio (tenant) tagging for log output.

Orders, outfits and stock all belong to one studio, and a single process
serves many studios. The active studio lives in a context variable; the
order store switches it whenever it hands out a studio's orders, so the
engine lines that follow are tagged without the engine knowing about
tenants.

Two places read the variable:

* ``get_studio_logger`` loggers stamp ``record.studio_id`` on their own
  records, which is what ``caplog`` and other record consumers see.
* ``studio_log_handler`` builds the console handler installed by
  ``load_config``. Its filter stamps every record it emits, including
  records from loggers that never went through ``get_studio_logger``, so
  a ``%(studio_id)s`` format can never fail on a missing attribute.

Usage:
    from outfit_rental.logging_context import get_studio_logger, studio_scope

    logger = get_studio_logger(__name__)
    with studio_scope("studio-42"):
        logger.info("Checking availability")
        # 2025-03-10 09:00:00 [outfit_rental.x] [studio-42] INFO: Checking availability
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import IO, Iterator, Optional

NO_STUDIO = "-"

STUDIO_LOG_FORMAT = "%(asctime)s [%(name)s] [%(studio_id)s] %(levelname)s: %(message)s"

_studio_id: ContextVar[str] = ContextVar("studio_id", default=NO_STUDIO)


def set_studio_id(studio_id: Optional[str]) -> Token:
    """Make ``studio_id`` the active studio; returns a token for ``reset_studio_id``."""
    return _studio_id.set(studio_id or NO_STUDIO)


def reset_studio_id(token: Token) -> None:
    """Restore the studio that was active before the matching ``set_studio_id``."""
    _studio_id.reset(token)


def get_studio_id() -> str:
    return _studio_id.get()


@contextmanager
def studio_scope(studio_id: Optional[str]) -> Iterator[str]:
    """Tag log lines with ``studio_id`` for the duration of the block."""
    token = set_studio_id(studio_id)
    try:
        yield get_studio_id()
    finally:
        reset_studio_id(token)


class StudioIdFilter(logging.Filter):
    """Stamps the active studio on records that do not carry one yet."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "studio_id"):
            record.studio_id = _studio_id.get()  # type: ignore[attr-defined]
        return True


def studio_log_handler(
    fmt: str = STUDIO_LOG_FORMAT,
    datefmt: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """Stream handler whose format may reference ``%(studio_id)s``."""
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.addFilter(StudioIdFilter())
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def get_studio_logger(name: str) -> logging.Logger:
    """Return a logger whose records carry ``studio_id``."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, StudioIdFilter) for f in logger.filters):
        logger.addFilter(StudioIdFilter())
    return logger
