from __future__ import annotations

from alphix.domain.entities.fee import PoolParams
from alphix.domain.entities.pool import PoolType
from alphix.domain.exceptions import InvalidParameterError


DAY_SECONDS = 86_400

_DEFAULT_PARAMS: dict[str, PoolParams] = {
    "stable": PoolParams(
        min_fee=50,
        max_fee=1_000,
        base_max_fee_delta=25,
        lookback_period=30,
        min_period=DAY_SECONDS,
        ratio_tolerance=5 * 10**15,
        linear_slope=5 * 10**17,
        max_current_ratio=10**21,
        lower_side_factor=10**18,
        upper_side_factor=10**18,
    ),
    "standard": PoolParams(
        min_fee=500,
        max_fee=10_000,
        base_max_fee_delta=100,
        lookback_period=30,
        min_period=DAY_SECONDS,
        ratio_tolerance=10**16,
        linear_slope=10**18,
        max_current_ratio=10**21,
        lower_side_factor=10**18,
        upper_side_factor=10**18,
    ),
    "volatile": PoolParams(
        min_fee=1_000,
        max_fee=50_000,
        base_max_fee_delta=500,
        lookback_period=15,
        min_period=DAY_SECONDS // 2,
        ratio_tolerance=2 * 10**16,
        linear_slope=15 * 10**17,
        max_current_ratio=10**21,
        lower_side_factor=10**18,
        upper_side_factor=12 * 10**17,
    ),
}


def default_params_for(pool_type: PoolType) -> PoolParams:
    params = _DEFAULT_PARAMS.get(pool_type)
    if params is None:
        raise InvalidParameterError(f"Unknown pool type '{pool_type}'.")
    return params
