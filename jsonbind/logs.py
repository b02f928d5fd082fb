"""Logging setup for the command line and the `get` shortcut for modules."""

from __future__ import annotations

from logging import DEBUG, INFO, WARNING, Formatter, StreamHandler, getLogger

get = getLogger

LOG_FORMAT = '%(levelname).1s %(asctime)s . %(message)s'


def init(debug_level: int = 0) -> None:
    """Log to stderr. Level 1 shows codec debug lines, level 2 adds the mapper's."""
    root_log = get()
    if root_log.handlers:
        return

    handler = StreamHandler()
    handler.setFormatter(Formatter(LOG_FORMAT))
    root_log.addHandler(handler)
    root_log.setLevel(WARNING)

    get('jsonbind').setLevel(DEBUG if debug_level > 0 else INFO)
    # module registration and hook lookups
    get('jsonbind.mapper').setLevel(DEBUG if debug_level > 1 else INFO)
