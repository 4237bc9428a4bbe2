"""Explicit, one-time logging setup for the composition root."""
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s [scroll_journey] %(levelname)s %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> bool:
    """
    Install the package log format on the root logger.

    Safe to call repeatedly: only the first call configures handlers, later
    calls just adjust the level.  Returns True when this call did the setup.
    """
    global _configured
    if _configured:
        logging.getLogger().setLevel(level.upper())
        return False
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    _configured = True
    return True


def is_configured() -> bool:
    return _configured
