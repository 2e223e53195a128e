from __future__ import annotations

from alphix.domain.entities.fee import FeeAdjustment, FeeState, PoolParams
from alphix.domain.exceptions import (
    CooldownNotElapsedError,
    InvalidFeeError,
    InvalidParameterError,
    InvalidRatioError,
)
from alphix.domain.services.ratio_math import (
    ONE,
    bounded_delta,
    clamp,
    mul_div,
    relative_deviation,
)
from alphix.domain.services.target_ratio_smoothing import TargetRatioSmoothing


MAX_ADJUSTMENT_RATE = ONE
MAX_LP_FEE = 1_000_000
OVERRIDE_FEE_FLAG = 0x400000


def validate_params(params: PoolParams) -> None:
    if params.min_fee < 0 or params.min_fee > params.max_fee or params.max_fee > MAX_LP_FEE:
        raise InvalidParameterError(
            f"Fee bounds must satisfy 0 <= min_fee <= max_fee <= {MAX_LP_FEE}."
        )


def validate_initial_state(*, initial_fee: int, initial_target_ratio: int, params: PoolParams) -> None:
    validate_params(params)
    if initial_fee < params.min_fee or initial_fee > params.max_fee:
        raise InvalidFeeError(initial_fee)
    if initial_target_ratio <= 0:
        raise InvalidRatioError(initial_target_ratio)


def validate_global_max_adj_rate(rate: int) -> None:
    if rate <= 0 or rate > MAX_ADJUSTMENT_RATE:
        raise InvalidParameterError(
            f"global max adjustment rate must be in (0, {MAX_ADJUSTMENT_RATE}]."
        )


def next_allowed_time(fee_state: FeeState, params: PoolParams) -> int:
    return fee_state.last_adjustment_timestamp + params.min_period


def fee_step(
    *,
    current_fee: int,
    current_ratio: int,
    target_ratio: int,
    params: PoolParams,
    global_max_adj_rate: int,
) -> int:
    """
    Absolute fee change proposed for one poke.

    The relative deviation of the ratio from the target is multiplied by
    ``linear_slope`` and by the side factor for the direction of the error,
    giving a rate expressed as a fraction of the current fee. The rate is
    capped by ``global_max_adj_rate`` and the resulting delta by
    ``base_max_fee_delta``.
    """
    deviation = relative_deviation(current_ratio, target_ratio)
    side_factor = params.upper_side_factor if current_ratio > target_ratio else params.lower_side_factor
    rate = mul_div(mul_div(deviation, params.linear_slope, ONE), side_factor, ONE)
    rate = min(rate, global_max_adj_rate)
    delta = mul_div(current_fee, rate, ONE)
    return bounded_delta(delta, params.base_max_fee_delta)


def compute_fee_adjustment(
    *,
    pool_id: str,
    fee_state: FeeState,
    params: PoolParams,
    current_ratio: int,
    global_max_adj_rate: int,
    now: int,
    smoothing: TargetRatioSmoothing,
) -> FeeAdjustment:
    if current_ratio <= 0:
        raise InvalidRatioError(current_ratio)
    validate_global_max_adj_rate(global_max_adj_rate)

    allowed_at = next_allowed_time(fee_state, params)
    if now < allowed_at:
        raise CooldownNotElapsedError(pool_id, allowed_at, params.min_period)

    ratio = min(current_ratio, params.max_current_ratio) if params.max_current_ratio > 0 else current_ratio
    target = fee_state.current_target_ratio
    old_fee = fee_state.current_fee

    deviation = relative_deviation(ratio, target)
    within_tolerance = deviation <= params.ratio_tolerance

    if within_tolerance:
        proposed = old_fee
    else:
        step = fee_step(
            current_fee=old_fee,
            current_ratio=ratio,
            target_ratio=target,
            params=params,
            global_max_adj_rate=global_max_adj_rate,
        )
        proposed = old_fee + step if ratio > target else old_fee - step

    # Bounds may have moved under a stored fee; clamp rather than revert.
    new_fee = clamp(proposed, params.min_fee, params.max_fee)

    new_target = smoothing.next_target(
        current_target=target,
        observed_ratio=ratio,
        lookback_period=params.lookback_period,
    )

    return FeeAdjustment(
        old_fee=old_fee,
        new_fee=new_fee,
        old_target_ratio=target,
        new_target_ratio=new_target,
        timestamp=max(fee_state.last_adjustment_timestamp, now),
        within_tolerance=within_tolerance,
    )
