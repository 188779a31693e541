"""
core/logging/logic/logger.py
============================

Process-wide logging setup. Modules keep using
``logger = logging.getLogger(__name__)``; this only wires the handler.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, TextIO

from core.config.config_service import LoggingConfig

ROOT_LOGGER_NAMES = ("core", "documents", "signature")

_configure_lock = threading.Lock()
_handler: Optional[logging.Handler] = None


def configure_logging(cfg: LoggingConfig, *, stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Attach one stream handler to the project loggers.

    Calling it again replaces the previous handler (level/format changes
    take effect, no duplicate output).
    """
    global _handler
    level = logging.getLevelName(str(cfg.level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {cfg.level!r}")

    with _configure_lock:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(cfg.format))
        for name in ROOT_LOGGER_NAMES:
            lg = logging.getLogger(name)
            if _handler is not None:
                lg.removeHandler(_handler)
            lg.addHandler(handler)
            lg.setLevel(level)
        _handler = handler
    return handler
