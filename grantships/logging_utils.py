"""Mini README: Application-wide logging helpers for Grant Ships.

Structure:
    * configure_root_logger - one-time root handler setup.
    * get_logger - factory returning module loggers with baseline config.

Usage:
    Modules create a module-level ``LOGGER = get_logger(__name__)``. Ledger
    state changes are logged at INFO, payout and allow-list failures at
    WARNING/ERROR. Configuration happens exactly once, so reloading modules
    under uvicorn's reloader does not stack duplicate handlers.
"""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER_INITIALISED = False


def configure_root_logger(level: int = logging.INFO) -> None:
    """Attach a single stream handler to the root logger."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
