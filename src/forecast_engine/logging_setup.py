"""Console logging configuration for the forecast engine."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the package logger.

    Calling this more than once only updates the level.
    """

    global _configured
    package_logger = logging.getLogger("forecast_engine")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False
    _configured = True


__all__ = ["configure_logging", "LOG_FORMAT"]
