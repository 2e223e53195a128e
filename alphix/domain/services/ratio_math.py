from __future__ import annotations

from enum import Enum


ONE = 10**18
PIPS_DENOMINATOR = 1_000_000
BPS_DENOMINATOR = 10_000


class Rounding(str, Enum):
    DOWN = "down"
    UP = "up"


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """(a * b) / denominator over non-negative integers with explicit rounding."""
    if denominator <= 0:
        raise ValueError("denominator must be positive.")
    if a < 0 or b < 0:
        raise ValueError("mul_div operands must be non-negative.")
    quotient, remainder = divmod(a * b, denominator)
    if rounding is Rounding.UP and remainder:
        quotient += 1
    return quotient


def mul_div_up(a: int, b: int, denominator: int) -> int:
    return mul_div(a, b, denominator, Rounding.UP)


def div_up(a: int, b: int) -> int:
    return mul_div(a, 1, b, Rounding.UP)


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def abs_diff(a: int, b: int) -> int:
    return a - b if a >= b else b - a


def relative_deviation(value: int, reference: int) -> int:
    """|value - reference| / reference in 1e18 fixed point."""
    if reference <= 0:
        raise ValueError("reference must be positive.")
    return mul_div(abs_diff(value, reference), ONE, reference)


def bounded_delta(delta: int, *caps: int) -> int:
    bounded = delta
    for cap in caps:
        bounded = min(bounded, cap)
    return max(bounded, 0)


def apply_pips(amount: int, pips: int) -> int:
    return mul_div(amount, pips, PIPS_DENOMINATOR)


def proportional(
    amount: int,
    numerator: int,
    denominator: int,
    rounding: Rounding,
) -> int:
    """amount * numerator / denominator, zero when the denominator is empty."""
    if denominator == 0:
        return 0
    return mul_div(amount, numerator, denominator, rounding)
