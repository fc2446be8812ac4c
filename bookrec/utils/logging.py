"""Application logging helpers.

Every logger lives under the ``bookrec`` namespace. Only the namespace root
carries a handler; child loggers (``bookrec.issuance``, ``bookrec.db`` ...)
propagate to it, so level and format from `bookrec.config` are applied in
one place and can be re-applied with `configure_logging()`.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from bookrec import config as app_config

ROOT_NAME = "bookrec"

_LOCK = threading.Lock()
_ROOT: Optional[logging.Logger] = None


class _BookrecHandler(logging.StreamHandler):
    """Marker type so reconfiguration finds and reuses our own handler."""


def configure_logging(level_name: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    global _ROOT
    with _LOCK:
        root = logging.getLogger(ROOT_NAME)
        level = getattr(logging, (level_name or app_config.log_level_name()).upper(), logging.INFO)
        root.setLevel(level)
        handler = next((h for h in root.handlers if isinstance(h, _BookrecHandler)), None)
        if handler is None:
            handler = _BookrecHandler()
            root.addHandler(handler)
        handler.setFormatter(logging.Formatter(fmt or app_config.log_format()))
        root.propagate = False
        _ROOT = root
        return root


def get_logger(name: str = ROOT_NAME) -> logging.Logger:
    root = _ROOT if _ROOT is not None else configure_logging()
    if name == ROOT_NAME:
        return root
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


__all__ = ["ROOT_NAME", "configure_logging", "get_logger"]
