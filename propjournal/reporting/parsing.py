"""Numeric-text parsing shared by every report.

Balances, limits and withdrawals are stored as whatever the trader typed
("$50,000", "1,250.50", ""). All readers go through ``parse_number`` so that
the stripping rule cannot drift between call sites.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_CENTS = Decimal("0.01")


def parse_number(value: Any) -> float:
    """Parse free-form numeric text.

    Every character that is not a digit, ``.`` or ``-`` is removed and the
    remainder is parsed as a decimal number. Blank, unparseable or
    non-finite results are 0.

    Args:
        value: Text (or any value; it is converted with ``str``). ``None``
            is treated as blank.

    Returns:
        The parsed number, or 0.0.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        value = ""
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return 0.0
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_fixed2(value: float) -> str:
    """Format a number with exactly two decimals.

    Halves round away from zero and a zero result is always ``"0.00"``.
    """
    if not math.isfinite(value):
        return "0.00"
    rounded = Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "0.00"
    return f"{rounded:.2f}"


def format_money(value: float) -> str:
    """Format a number for display with thousands separators."""
    if not math.isfinite(value):
        return "—"
    return f"{value:,.2f}"
