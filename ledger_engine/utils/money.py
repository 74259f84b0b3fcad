"""
Ledger Engine - Monetary Arithmetic

Fixed-precision decimal helpers used by every ledger and tax component.
Amounts are carried as Decimal end to end; rounding to the cent happens only
where a value is stored, posted or reported.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0.00")
ONE = Decimal("1")
CENT = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")


def to_decimal(value: Number) -> Decimal:
    """
    Convert a value to Decimal.
    
    Floats go through str() so the binary representation error of the float
    never reaches the ledger (0.1 becomes Decimal("0.1"), not 0.1000000000000000055...).
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary value")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(value: Number) -> Decimal:
    """Round to the minor currency unit (half away from zero)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Number) -> Decimal:
    """Round an exchange rate to six places."""
    return to_decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def add(*values: Number) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += to_decimal(value)
    return total


def subtract(minuend: Number, subtrahend: Number) -> Decimal:
    return to_decimal(minuend) - to_decimal(subtrahend)


def multiply(amount: Number, factor: Number) -> Decimal:
    """Exact product, not rounded."""
    return to_decimal(amount) * to_decimal(factor)


def divide(amount: Number, divisor: Number) -> Decimal:
    divisor = to_decimal(divisor)
    if divisor == 0:
        raise ZeroDivisionError("Cannot divide a monetary amount by zero")
    return to_decimal(amount) / divisor


def percentage(amount: Number, rate: Number) -> Decimal:
    """
    Apply a fractional rate (0.15 for 15%) and round to the cent.
    
    Use multiply() instead when the result feeds an aggregate that is
    rounded later.
    """
    return round2(multiply(amount, rate))


def sum_money(values: Iterable[Number]) -> Decimal:
    """Exact sum rounded once at the end."""
    return round2(add(*values))


def is_zero(value: Number) -> bool:
    return round2(value) == ZERO


def within_tolerance(left: Number, right: Number, tolerance: Number = CENT) -> bool:
    """
    True when the two amounts differ by less than the tolerance.
    
    With cent-rounded inputs and the default one-cent tolerance this means
    the amounts are equal to the cent.
    """
    return abs(to_decimal(left) - to_decimal(right)) < to_decimal(tolerance)
