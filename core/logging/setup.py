"""
core/logging/setup.py
=====================

One-time stdlib logging configuration for the service process.
Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler and level.
"""
from __future__ import annotations

import logging
import threading

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False
_lock = threading.Lock()


def configure_logging(level: str | int = "INFO", *, force: bool = False) -> None:
    """Install a stream handler on the root logger (idempotent unless *force*)."""
    global _configured
    with _lock:
        if _configured and not force:
            return
        if isinstance(level, str):
            level = logging.getLevelName(level.strip().upper())
            if not isinstance(level, int):
                level = logging.INFO
        logging.basicConfig(level=level, format=_FORMAT, force=force)
        _configured = True
