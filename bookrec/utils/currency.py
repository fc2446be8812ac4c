from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Coerce a stored or computed amount to a 2-place Decimal.

    None and empty values count as zero; SQLite may hand back floats for
    aggregated NUMERIC columns, so go through str() first.
    """
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return ZERO


def _format_number(value: Decimal, decimal_sep: str, thousands_sep: str) -> str:
    sign = "-" if value.is_signed() else ""
    q = value.copy_abs()
    as_str = f"{q:.2f}"
    whole, frac = as_str.split(".")
    # group thousands
    groups = []
    while whole:
        groups.append(whole[-3:])
        whole = whole[:-3]
    grouped = thousands_sep.join(reversed(groups)) if groups else "0"
    return f"{sign}{grouped}{decimal_sep}{frac}"


def format_money(value: Any) -> str:
    """Render an amount the way fine reports show it: "$1.50"."""
    if value is None or value == "":
        return ""
    dec = to_money(value)
    return f"${_format_number(dec, decimal_sep='.', thousands_sep=',')}"


__all__ = ["CENT", "ZERO", "to_money", "format_money"]
