"""Decimal helpers for currency arithmetic.

Every monetary value in the engine is a ``Decimal``. Floats are converted
through their string form so ``0.1`` stays ``Decimal("0.1")``.

Rounding happens only at the points the tax rules define. Whole currency
units are produced with halves rounded toward positive infinity, so that
``2.5`` becomes ``3`` and ``-2.5`` becomes ``-2``.
"""

from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Optional, Union

Numeric = Union[int, float, str, Decimal]

ZERO = Decimal("0")
HALF = Decimal("0.5")
WHOLE_UNIT = Decimal("1")


def to_decimal(value: Optional[Numeric]) -> Decimal:
    """Convert a numeric value to Decimal, treating ``None`` and blanks as zero.

    Examples:
        >>> to_decimal(None)
        Decimal('0')
        >>> to_decimal(0.67)
        Decimal('0.67')
        >>> to_decimal("  ")
        Decimal('0')

    Raises:
        ValueError: If ``value`` is not a number.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a number: {value!r}") from e


def round_currency(value: Numeric) -> Decimal:
    """Round to the nearest whole currency unit, halves toward +infinity.

    Examples:
        >>> round_currency(Decimal("3672.5"))
        Decimal('3673')
        >>> round_currency(Decimal("-2.5"))
        Decimal('-2')
    """
    return (to_decimal(value) + HALF).quantize(WHOLE_UNIT, rounding=ROUND_FLOOR)


def clamp_non_negative(value: Decimal) -> Decimal:
    """Return ``value`` or zero, whichever is larger."""
    return value if value > ZERO else ZERO


__all__ = [
    "Numeric",
    "ZERO",
    "to_decimal",
    "round_currency",
    "clamp_non_negative",
]
