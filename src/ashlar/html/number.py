"""Number formatting helpers.

Both helpers return plain ``str``: their output is digits and the
caller-chosen delimiter and separator, which are escaped on output like any
other string.

"""

from __future__ import annotations

import math
from decimal import Decimal

DEFAULT_DELIMITER = ","
DEFAULT_SEPARATOR = "."
DEFAULT_PRECISION = 3

Number = int | float | Decimal


def _split(number: Number) -> tuple[str, str, str | None]:
    """Split into ``(sign, integer digits, fraction digits or None)``."""
    if isinstance(number, bool) or not isinstance(number, (int, float, Decimal)):
        raise TypeError(f"expected a number, got {type(number).__name__}")
    if isinstance(number, int):
        return ("-" if number < 0 else ""), str(abs(number)), None

    if isinstance(number, float):
        if not math.isfinite(number):
            raise ValueError(f"cannot format non-finite number {number!r}")
        # repr gives the shortest round-tripping digits
        number = Decimal(repr(number))
    elif not number.is_finite():
        raise ValueError(f"cannot format non-finite number {number!r}")

    text = format(number, "f")
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    integer, _, fraction = text.partition(".")
    return sign, integer, fraction or "0"


def _put_delimiter(digits: str, delimiter: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.append(digits[-3:])
        digits = digits[:-3]
    groups.append(digits)
    return delimiter.join(reversed(groups))


def number_with_delimiter(
    number: Number,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Format a number grouping thousands with ``delimiter``.

    Example:
        >>> number_with_delimiter(12345)
        '12,345'
        >>> number_with_delimiter(12345, delimiter=" ")
        '12 345'
        >>> number_with_delimiter(12345.678, delimiter=" ", separator=",")
        '12 345,678'
    """
    sign, integer, fraction = _split(number)
    left = sign + _put_delimiter(integer, delimiter)
    if fraction is None:
        return left
    return f"{left}{separator}{fraction}"


def number_with_precision(
    number: Number,
    *,
    precision: int = DEFAULT_PRECISION,
    delimiter: str = DEFAULT_DELIMITER,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Format a number with exactly ``precision`` fraction digits.

    Extra digits are truncated, not rounded; missing ones are zero-padded.

    Example:
        >>> number_with_precision(12.3456)
        '12.345'
        >>> number_with_precision(123)
        '123.000'
        >>> number_with_precision(12.345, precision=0)
        '12'
    """
    if precision < 0:
        raise ValueError(f"precision must be >= 0, got {precision}")
    sign, integer, fraction = _split(number)
    right = (fraction or "")[:precision].ljust(precision, "0")
    if not (integer + right).strip("0"):
        # truncated to zero: no "-0"
        sign = ""
    left = sign + _put_delimiter(integer, delimiter)
    if precision == 0:
        return left
    return f"{left}{separator}{right}"
