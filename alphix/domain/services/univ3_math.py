from __future__ import annotations

from decimal import Decimal, localcontext

from alphix.domain.services.ratio_math import div_up, mul_div, mul_div_up


Q96 = 2**96
MIN_TICK = -887272
MAX_TICK = 887272
TICK_BASE = Decimal("1.0001")


def tick_to_sqrt_price_x96(tick: int) -> int:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError("tick out of bounds.")
    with localcontext() as ctx:
        ctx.prec = 80
        sqrt_price = (TICK_BASE ** tick).sqrt(ctx)
        return int((sqrt_price * Q96).to_integral_value())


def sqrt_price_x96_to_price(sqrt_price_x96: int) -> Decimal:
    if sqrt_price_x96 <= 0:
        raise ValueError("Invalid sqrt_price_x96.")
    sqrt_price = Decimal(sqrt_price_x96) / Decimal(Q96)
    return sqrt_price * sqrt_price


def min_usable_tick(tick_spacing: int) -> int:
    _validate_spacing(tick_spacing)
    return -((-MIN_TICK) // tick_spacing) * tick_spacing


def max_usable_tick(tick_spacing: int) -> int:
    _validate_spacing(tick_spacing)
    return (MAX_TICK // tick_spacing) * tick_spacing


def is_aligned(tick: int, tick_spacing: int) -> bool:
    _validate_spacing(tick_spacing)
    return tick % tick_spacing == 0


def tick_in_range(tick: int, tick_lower: int, tick_upper: int) -> bool:
    return tick_lower <= tick < tick_upper


def amount0_for_liquidity(sqrt_a_x96: int, sqrt_b_x96: int, liquidity: int, *, round_up: bool) -> int:
    sqrt_a_x96, sqrt_b_x96 = sorted((sqrt_a_x96, sqrt_b_x96))
    if sqrt_a_x96 <= 0:
        raise ValueError("sqrt price must be positive.")
    numerator1 = liquidity << 96
    numerator2 = sqrt_b_x96 - sqrt_a_x96
    if round_up:
        return div_up(mul_div_up(numerator1, numerator2, sqrt_b_x96), sqrt_a_x96)
    return mul_div(numerator1, numerator2, sqrt_b_x96) // sqrt_a_x96


def amount1_for_liquidity(sqrt_a_x96: int, sqrt_b_x96: int, liquidity: int, *, round_up: bool) -> int:
    sqrt_a_x96, sqrt_b_x96 = sorted((sqrt_a_x96, sqrt_b_x96))
    if round_up:
        return mul_div_up(liquidity, sqrt_b_x96 - sqrt_a_x96, Q96)
    return mul_div(liquidity, sqrt_b_x96 - sqrt_a_x96, Q96)


def amounts_for_liquidity(
    *,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
    round_up: bool,
) -> tuple[int, int]:
    sqrt_a = tick_to_sqrt_price_x96(tick_lower)
    sqrt_b = tick_to_sqrt_price_x96(tick_upper)

    if sqrt_price_x96 <= sqrt_a:
        return amount0_for_liquidity(sqrt_a, sqrt_b, liquidity, round_up=round_up), 0
    if sqrt_price_x96 >= sqrt_b:
        return 0, amount1_for_liquidity(sqrt_a, sqrt_b, liquidity, round_up=round_up)
    return (
        amount0_for_liquidity(sqrt_price_x96, sqrt_b, liquidity, round_up=round_up),
        amount1_for_liquidity(sqrt_a, sqrt_price_x96, liquidity, round_up=round_up),
    )


def _validate_spacing(tick_spacing: int) -> None:
    if tick_spacing <= 0:
        raise ValueError("tick_spacing must be positive.")
