"""Value helpers for the evaluator.

Integer arithmetic follows 64-bit two's complement hardware semantics;
number arithmetic is IEEE 754 double precision.
"""

from __future__ import annotations

import math

from modscript.model.variables import INT64_MAX, INT64_MIN


class InvalidOperationError(NotImplementedError):
    """An evaluation entry point does not match the node's result type."""


_INT64_SPAN = 2**64


def wrap_int64(value: int) -> int:
    """Wrap an unbounded Python int into the signed 64-bit range."""
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return (value - INT64_MIN) % _INT64_SPAN + INT64_MIN


def integer_divide(left: int, right: int) -> int:
    """Integer division truncating toward zero.

    Division by zero raises ``ZeroDivisionError``.
    """
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    return wrap_int64(quotient)


def integer_power(base: int, exponent: int) -> int:
    """Exact integer exponentiation, wrapped to 64 bits.

    The result is reduced modulo 2**64 while it is computed, so the cost is
    logarithmic in *exponent*. Negative exponents give the real result
    truncated toward zero.
    """
    if exponent >= 0:
        return wrap_int64(pow(base, exponent, _INT64_SPAN))
    if base == 0:
        raise ZeroDivisionError("0 cannot be raised to a negative power")
    if base == 1:
        return 1
    if base == -1:
        return -1 if exponent % 2 else 1
    return 0


def number_divide(left: float, right: float) -> float:
    """IEEE division: x/0 gives +-inf, 0/0 gives nan."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and abs(math.fmod(value, 2.0)) == 1.0


def number_power(base: float, exponent: float) -> float:
    """IEEE pow: overflow and ``0 ** negative`` give an infinity.

    The infinity keeps the sign of *base* when *exponent* is an odd integer.
    """
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return _signed_infinity(base, exponent)
    except ValueError:
        # negative base with fractional exponent, or 0 ** negative
        if base == 0.0:
            return _signed_infinity(base, exponent)
        return math.nan


def _signed_infinity(base: float, exponent: float) -> float:
    if _is_odd_integer(exponent):
        return math.copysign(math.inf, base)
    return math.inf
