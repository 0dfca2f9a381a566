"""Core utilities shared across :mod:`chunkscout` modules.

The core namespace provides configuration loading and logging setup so the
analysis, source and scan packages stay lightweight.

Example:
    >>> from chunkscout.core import get_logger
    >>> logger = get_logger(__name__)
    >>> isinstance(logger, object)
    True
"""

from __future__ import annotations

from .config import AppConfig, load_config
from .logging import configure_logging, get_logger

__all__ = [
    "AppConfig",
    "configure_logging",
    "get_logger",
    "load_config",
]
