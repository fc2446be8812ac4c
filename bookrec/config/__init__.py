"""Application configuration accessors.

Centralizes environment variable parsing & defaults. Every setting is read
at call time so tests can monkeypatch the environment between cases.
"""
from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from functools import lru_cache

APP_NAME = "bookrec"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Library lending, fines and recommendation engine"

DEFAULT_DB_PATH = "bookrec.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "[bookrec] %(asctime)s %(levelname)s %(name)s %(message)s"
DEFAULT_LOAN_DAYS = 14
DEFAULT_FINE_RATE = "0.50"
DEFAULT_RECOMMENDATION_LIMIT = 5
_TRUE = {"1", "true", "yes", "on"}


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.lower() in _TRUE


def env_int(name: str, default: int) -> int:
    raw = _raw_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def get_db_path() -> str:
    return _raw_env("BOOKREC_DB_PATH", DEFAULT_DB_PATH)  # type: ignore[return-value]


def get_db_url() -> str:
    """SQLAlchemy URL for the library store.

    BOOKREC_DB_URL wins when set (e.g. a MySQL DSN); otherwise a SQLite
    URL is derived from BOOKREC_DB_PATH.
    """
    url = _raw_env("BOOKREC_DB_URL")
    if url and url.strip():
        return url.strip()
    path = get_db_path()
    if path == ":memory:":
        return "sqlite://"
    return f"sqlite:///{path}"


def log_level_name() -> str:
    return _raw_env("BOOKREC_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()  # type: ignore[union-attr]


def log_format() -> str:
    """Record format for the stream handler (BOOKREC_LOG_FORMAT)."""
    raw = _raw_env("BOOKREC_LOG_FORMAT")
    return raw if raw and raw.strip() else DEFAULT_LOG_FORMAT


def loan_period_days() -> int:
    days = env_int("BOOKREC_LOAN_DAYS", DEFAULT_LOAN_DAYS)
    return days if days > 0 else DEFAULT_LOAN_DAYS


def fine_rate_per_day() -> Decimal:
    raw = _raw_env("BOOKREC_FINE_RATE", DEFAULT_FINE_RATE)
    try:
        rate = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return Decimal(DEFAULT_FINE_RATE)
    return rate if rate >= 0 else Decimal(DEFAULT_FINE_RATE)


def recommendation_limit() -> int:
    limit = env_int("BOOKREC_RECOMMENDATION_LIMIT", DEFAULT_RECOMMENDATION_LIMIT)
    return limit if limit > 0 else DEFAULT_RECOMMENDATION_LIMIT


@lru_cache(maxsize=1)
def metadata() -> dict:
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    }


def summarize_runtime_config() -> dict:
    return {
        "db_url": get_db_url(),
        "log_level": log_level_name(),
        "log_format": log_format(),
        "loan_days": loan_period_days(),
        "fine_rate": str(fine_rate_per_day()),
        "recommendation_limit": recommendation_limit(),
    }


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "APP_DESCRIPTION",
    "env_bool",
    "env_int",
    "get_db_path",
    "get_db_url",
    "log_level_name",
    "log_format",
    "loan_period_days",
    "fine_rate_per_day",
    "recommendation_limit",
    "metadata",
    "summarize_runtime_config",
]
