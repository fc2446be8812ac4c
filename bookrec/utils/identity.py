"""Identity normalization helpers."""
from __future__ import annotations

import re
from typing import Any, Optional

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6}$")


def normalize_username(raw: Any) -> Optional[str]:
    """Trim a typed-in username; usernames stay case-sensitive."""
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


def normalize_email(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def fold(value: Any) -> str:
    """Lower-cased, trimmed form used for author/genre/title comparisons."""
    if value is None:
        return ""
    return str(value).strip().lower()


__all__ = ["normalize_username", "normalize_email", "is_valid_email", "fold"]
