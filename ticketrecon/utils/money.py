"""
Conversions between currency strings and integer cents.

This is the only place where decimal input becomes cents. Everything past
this boundary works on integers.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

# Commas are only accepted as thousands separators: 1,234.50
_THOUSANDS_PATTERN = re.compile(r"^-?\d{1,3}(,\d{3})+(\.\d+)?$")


def to_cents(value: Union[str, int, float, Decimal]) -> int:
    """
    Convert a currency amount to cents, rounding to the nearest cent once.

    Floats go through their shortest repr so 59.9 becomes 5990, not 5989.

    Raises:
        ValueError: if the value is not a finite number, or uses a comma
            anywhere but as a thousands separator (e.g. "60,00").
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, float):
        value = repr(value)
    if isinstance(value, str):
        value = value.strip()
        if "," in value:
            if not _THOUSANDS_PATTERN.match(value):
                raise ValueError(f"Not an amount: {value!r}")
            value = value.replace(",", "")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not an amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    return int((amount / CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Render cents as a plain two-decimal amount, e.g. 6000 -> '60.00'."""
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"
