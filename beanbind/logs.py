"""Helpers for configuring and using project logging."""

from __future__ import annotations

import sys
from logging import DEBUG, INFO, WARNING, Formatter, StreamHandler, getLogger
from types import TracebackType

get = getLogger
log = get(__name__)

# loggers of the mapping engine, which only log at debug level
ENGINE_LOGGERS = (
    'beanbind.catalog',
    'beanbind.binding',
    'beanbind.adapters',
    'beanbind.resolver',
    'beanbind.decoder',
    'beanbind.encoder',
    'beanbind.fallback',
)


def set_levels(debug_level: int = 0) -> None:
    """Apply a verbosity level to the project loggers.

    0 logs warnings, 1 adds info and codec/CLI debug output, 2 enables
    engine debug output (catalog building and type tag resolution).
    """
    get('beanbind').setLevel(DEBUG if debug_level > 0 else WARNING)
    for name in ENGINE_LOGGERS:
        get(name).setLevel(DEBUG if debug_level > 1 else INFO)


def init(debug_level: int = 0, log_exceptions: bool = True) -> None:
    """Initializes simple logging defaults."""
    set_levels(debug_level)

    root_log = get()
    if root_log.handlers:
        return

    handler = StreamHandler(sys.stderr)
    handler.setFormatter(Formatter('%(levelname).1s %(asctime)s %(name)s: %(message)s'))

    root_log.addHandler(handler)
    root_log.setLevel(DEBUG if debug_level > 0 else WARNING)

    if log_exceptions:
        sys.excepthook = handle_exception


def handle_exception(
    etype: type[BaseException],
    evalue: BaseException,
    etb: TracebackType | None,
) -> None:
    """Log uncaught exceptions while letting Ctrl+C exit quietly."""
    if issubclass(etype, KeyboardInterrupt):
        sys.__excepthook__(etype, evalue, etb)
        return
    log.error('unhandled exception', exc_info=(etype, evalue, etb))
