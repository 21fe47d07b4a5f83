"""Display formatting and free-typed currency parsing.

All helpers here are total: malformed input produces an empty string, ``"N/A"``
or a zero amount, never an exception. Rounding is half away from zero and is
applied to the exact binary value of the float, matching what browser number
formatting shows for the same input.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional

from .coerce import to_float

_NON_NUMERIC = re.compile(r"[^0-9.]")
# Enough digits to hold any float exactly, subnormals scaled by 100 included.
_PRECISION = 800


def format_currency(value: Any) -> str:
    """Whole-dollar USD string, e.g. ``1234.9 -> "$1,235"``."""

    number = to_float(value)
    if number is None:
        number = 0.0
    rounded = _round_exact(number, places=0)
    sign = "-" if math.copysign(1.0, number) < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"


def format_percentage(value: Optional[Any]) -> str:
    """Render a percentage number (``7.25`` meaning 7.25%) with two decimals."""

    if value is None:
        return "N/A"
    number = to_float(value)
    if number is None:
        return "N/A"
    fraction = number / 100
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        percent = Decimal(fraction) * 100
    rounded = _round_exact(percent, places=2)
    sign = "-" if math.copysign(1.0, fraction) < 0 else ""
    return f"{sign}{abs(rounded):,.2f}%"


def parse_currency(raw: Optional[str]) -> str:
    """Strip everything but digits and decimal points."""

    if raw is None:
        return ""
    return _NON_NUMERIC.sub("", str(raw))


def format_input_currency(raw: Optional[str]) -> str:
    cleaned = parse_currency(raw)
    if not cleaned:
        return ""
    try:
        number = float(cleaned)
    except ValueError:
        return ""
    return format_currency(number)


def _round_exact(value: float | Decimal, places: int) -> Decimal:
    exact = value if isinstance(value, Decimal) else Decimal(value)
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return exact.quantize(quantum, rounding=ROUND_HALF_UP)


__all__ = ["format_currency", "format_percentage", "parse_currency", "format_input_currency"]
