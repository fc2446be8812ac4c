"""Utility helpers."""
from .identity import (
    normalize_username,
    normalize_email,
    is_valid_email,
    fold,
)
from .currency import to_money, format_money

__all__ = [
    "normalize_username",
    "normalize_email",
    "is_valid_email",
    "fold",
    "to_money",
    "format_money",
]
