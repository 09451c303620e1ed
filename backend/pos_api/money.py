"""
Fixed-point money helpers.

All prices and totals are handled as decimal.Decimal with two fractional
digits. Floats never take part in arithmetic; values arriving as JSON numbers
are converted through their string form.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# NUMERIC(10,2) upper bound
MAX_AMOUNT = Decimal("99999999.99")


def to_money(value) -> Decimal:
    """
    Convert a stored or submitted amount to a two-place Decimal.

    Raises ValueError for values that are not finite numbers.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError("Amount must be a number")
    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def has_at_most_cents(value) -> bool:
    """True when value has no more than two fractional digits."""
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    exponent = amount.normalize().as_tuple().exponent
    return not isinstance(exponent, int) or exponent >= -2


def line_total(price: Decimal, quantity: int) -> Decimal:
    return (price * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str | None:
    if value is None:
        return None
    return str(to_money(value))
