"""Database layer root."""

from .engine import (
    Store,
    init_engine_once,
    get_store,
)

__all__ = [
    "Store",
    "init_engine_once",
    "get_store",
]
