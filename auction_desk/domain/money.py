"""Decimal helpers for auction amounts."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")


def parse_amount(value: Any) -> Decimal | None:
    """Return ``value`` as a finite :class:`Decimal`, or ``None``.

    Accepts form strings, ints, floats and Decimals. Empty strings, ``None``,
    NaN and infinities all come back as ``None``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # via str() so 0.1 stays 0.1 instead of its binary expansion
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def to_wire(amount: Decimal | None) -> float | None:
    """Render an amount as a JSON number rounded to cents."""

    if amount is None:
        return None
    return float(amount.quantize(CENT))


def format_amount(amount: Decimal | None, symbol: str = "₱") -> str:
    if amount is None:
        return "-"
    return f"{symbol}{amount.quantize(CENT):,}"


__all__ = ["CENT", "format_amount", "parse_amount", "to_wire"]
