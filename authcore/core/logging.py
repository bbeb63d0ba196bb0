"""Shared logging helpers."""

from __future__ import annotations

import logging
from typing import Optional, Union

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO, *, fmt: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust its level."""
    global _CONFIGURED
    resolved = _coerce_level(level)
    if not _CONFIGURED:
        logging.basicConfig(level=resolved, format=fmt or _DEFAULT_FORMAT)
        _CONFIGURED = True
    # basicConfig is a no-op when the root logger already has handlers.
    logging.getLogger().setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger; configuration is left to `setup_logging`."""
    return logging.getLogger(name)
