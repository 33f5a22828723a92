"""Logging utilities for the model provisioner.

Modules log through ``logging.getLogger(__name__)``; the process entry point
calls :func:`configure_logging` once with the verbose flag taken from
``RuntimeSettings``.
"""

from __future__ import annotations

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that are only interesting when debugging.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for the long-running process.

    Args:
        verbose: Enable DEBUG output (including request traces) when True.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    for name in _NOISY_LOGGERS:
        set_component_level(name, logging.DEBUG if verbose else logging.WARNING)


def set_component_level(component: str, level: Union[str, int]) -> None:
    """Set log level for a specific component.

    Accepts either string levels (e.g., "INFO") or numeric constants.
    """
    if isinstance(level, str):
        level_value = getattr(logging, level.upper(), logging.INFO)
    else:
        level_value = level
    logging.getLogger(component).setLevel(level_value)


def obfuscate_key(key: str) -> str:
    """Return a log-safe rendering of a secret."""
    if len(key) < 6:
        return "REDACTED"
    return f"{key[:4]}..REDACTED..{key[-2:]}"
