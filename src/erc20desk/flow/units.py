"""
Base-unit conversion and amount validation.

Token amounts travel as decimal strings in the UI and as integers of base
units on chain. Conversions use ``Decimal`` under a wide local context so
that 18-decimal values never lose precision.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

TOKEN_DECIMALS = 18
DISPLAY_PLACES = 4

Amount = Union[str, int, Decimal]


def parse_amount(value: Amount) -> Decimal:
    """
    Parse a user-entered amount.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"Amount must be a decimal string, not {type(value).__name__}")
    try:
        number = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return number


def to_base_units(amount: Amount, decimals: int = TOKEN_DECIMALS) -> int:
    """
    Convert a decimal amount to an integer of base units.

    Raises:
        ValueError: Negative amounts, or more fractional digits than
            ``decimals`` allows
    """
    number = parse_amount(amount)
    if number < 0:
        raise ValueError(f"Amount must not be negative: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 999
        scaled = number.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Amount {amount!r} has more than {decimals} decimal places")
        return int(scaled)


def from_base_units(raw: int, decimals: int = TOKEN_DECIMALS) -> Decimal:
    """Convert base units to a decimal amount (exact)."""
    if raw < 0:
        raise ValueError(f"Base-unit amount must not be negative: {raw}")
    with localcontext() as ctx:
        ctx.prec = 999
        return Decimal(raw).scaleb(-decimals)


def format_display(amount: Decimal, places: int = DISPLAY_PLACES) -> str:
    """Fixed-point display string, e.g. ``Decimal("1.5") -> "1.5000"``."""
    with localcontext() as ctx:
        ctx.prec = 999
        return str(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def validate_amount(amount: Amount, balance: Amount, decimals: int = TOKEN_DECIMALS) -> bool:
    """
    True iff ``0 < amount <= balance`` and ``amount`` fits in ``decimals``
    fractional digits; unparsable input is invalid.
    """
    try:
        value = parse_amount(amount)
        limit = parse_amount(balance)
    except ValueError:
        return False
    with localcontext() as ctx:
        ctx.prec = 999
        scaled = value.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            return False
    return Decimal(0) < value <= limit
