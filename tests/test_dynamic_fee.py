from __future__ import annotations

import random
from dataclasses import replace

import pytest

from alphix.domain.entities.fee import FeeState
from alphix.domain.exceptions import (
    CooldownNotElapsedError,
    InvalidFeeError,
    InvalidParameterError,
    InvalidRatioError,
)
from alphix.domain.services.dynamic_fee import (
    MAX_LP_FEE,
    compute_fee_adjustment,
    fee_step,
    validate_global_max_adj_rate,
    validate_initial_state,
    validate_params,
)
from alphix.domain.services.pool_defaults import default_params_for
from alphix.domain.services.ratio_math import ONE
from alphix.domain.services.target_ratio_smoothing import (
    EmaTargetSmoothing,
    FixedTargetSmoothing,
    get_smoothing_strategy,
)


PARAMS = replace(default_params_for("standard"), min_fee=500, max_fee=10_000)
TARGET = 5 * 10**17
T0 = 1_000_000


def _state(fee: int = 1000, target: int = TARGET, last: int = T0) -> FeeState:
    return FeeState(current_fee=fee, current_target_ratio=target, last_adjustment_timestamp=last)


def _adjust(state: FeeState, ratio: int, *, params=PARAMS, now: int | None = None, smoothing=None, rate=ONE):
    return compute_fee_adjustment(
        pool_id="0xpool",
        fee_state=state,
        params=params,
        current_ratio=ratio,
        global_max_adj_rate=rate,
        now=now if now is not None else state.last_adjustment_timestamp + params.min_period,
        smoothing=smoothing or EmaTargetSmoothing(),
    )


class TestComputeFeeAdjustment:
    def test_ratio_above_target_raises_fee(self):
        result = _adjust(_state(), 8 * 10**17)
        assert result.new_fee > 1000
        assert result.new_fee <= PARAMS.max_fee
        assert result.within_tolerance is False

    def test_ratio_below_target_lowers_fee(self):
        result = _adjust(_state(), 2 * 10**17)
        assert PARAMS.min_fee <= result.new_fee < 1000

    def test_fee_step_is_capped_by_base_max_fee_delta(self):
        # deviation 0.6 * slope 1.0 of a 1000 fee would be 600.
        result = _adjust(_state(), 8 * 10**17)
        assert result.new_fee == 1000 + PARAMS.base_max_fee_delta

    def test_fee_step_is_capped_by_global_rate(self):
        step = fee_step(
            current_fee=1000,
            current_ratio=8 * 10**17,
            target_ratio=TARGET,
            params=replace(PARAMS, base_max_fee_delta=10_000),
            global_max_adj_rate=10**17,
        )
        assert step == 100

    def test_side_factor_scales_step(self):
        params = replace(PARAMS, base_max_fee_delta=10_000, upper_side_factor=2 * ONE)
        up = fee_step(
            current_fee=1000,
            current_ratio=6 * 10**17,
            target_ratio=TARGET,
            params=params,
            global_max_adj_rate=ONE,
        )
        down = fee_step(
            current_fee=1000,
            current_ratio=4 * 10**17,
            target_ratio=TARGET,
            params=params,
            global_max_adj_rate=ONE,
        )
        assert up == 2 * down

    def test_within_tolerance_keeps_fee(self):
        result = _adjust(_state(), TARGET + TARGET // 200)
        assert result.within_tolerance is True
        assert result.new_fee == 1000

    def test_within_tolerance_still_clamps_out_of_bounds_fee(self):
        result = _adjust(_state(fee=20_000), TARGET)
        assert result.within_tolerance is True
        assert result.new_fee == PARAMS.max_fee

    def test_fee_stays_within_bounds_for_random_ratios(self):
        rng = random.Random(7)
        state = _state()
        for _ in range(50):
            ratio = rng.randint(1, 5 * ONE)
            result = _adjust(state, ratio)
            assert PARAMS.min_fee <= result.new_fee <= PARAMS.max_fee
            assert result.new_target_ratio >= 1
            state = result.to_fee_state()

    def test_cooldown_rejects_early_adjustment(self):
        state = _state()
        with pytest.raises(CooldownNotElapsedError) as excinfo:
            _adjust(state, 8 * 10**17, now=T0 + PARAMS.min_period - 1)
        assert excinfo.value.next_allowed_time == T0 + PARAMS.min_period

    def test_timestamp_records_adjustment_time(self):
        now = T0 + PARAMS.min_period + 42
        result = _adjust(_state(last=T0), 8 * 10**17, now=now)
        assert result.timestamp == now

    def test_zero_ratio_is_rejected(self):
        with pytest.raises(InvalidRatioError):
            _adjust(_state(), 0)

    def test_ratio_is_capped_at_max_current_ratio(self):
        params = replace(PARAMS, max_current_ratio=6 * 10**17)
        result = _adjust(_state(), 50 * ONE, params=params, smoothing=FixedTargetSmoothing())
        capped = _adjust(_state(), 6 * 10**17, params=params, smoothing=FixedTargetSmoothing())
        assert result.new_fee == capped.new_fee

    def test_ema_moves_target_towards_ratio(self):
        result = _adjust(_state(), 8 * 10**17)
        expected_step = (3 * 10**17 * 2) // (PARAMS.lookback_period + 1)
        assert result.new_target_ratio == TARGET + expected_step

    def test_fixed_smoothing_keeps_target(self):
        result = _adjust(_state(), 8 * 10**17, smoothing=FixedTargetSmoothing())
        assert result.new_target_ratio == TARGET


class TestValidation:
    def test_params_require_ordered_bounds(self):
        validate_params(PARAMS)
        with pytest.raises(InvalidParameterError):
            validate_params(replace(PARAMS, min_fee=20_000))
        with pytest.raises(InvalidParameterError):
            validate_params(replace(PARAMS, max_fee=MAX_LP_FEE + 1))

    def test_initial_state_requires_fee_in_bounds_and_positive_target(self):
        with pytest.raises(InvalidFeeError):
            validate_initial_state(initial_fee=100, initial_target_ratio=TARGET, params=PARAMS)
        with pytest.raises(InvalidRatioError):
            validate_initial_state(initial_fee=1000, initial_target_ratio=0, params=PARAMS)

    def test_global_max_adj_rate_bounds(self):
        validate_global_max_adj_rate(ONE)
        with pytest.raises(InvalidParameterError):
            validate_global_max_adj_rate(0)
        with pytest.raises(InvalidParameterError):
            validate_global_max_adj_rate(ONE + 1)

    @pytest.mark.parametrize("pool_type", ["stable", "standard", "volatile"])
    def test_default_params_are_valid(self, pool_type):
        validate_params(default_params_for(pool_type))


class TestSmoothing:
    def test_ema_floors_target_at_one(self):
        assert EmaTargetSmoothing().next_target(current_target=1, observed_ratio=0, lookback_period=0) == 1

    def test_ema_with_zero_lookback_jumps_to_ratio(self):
        assert EmaTargetSmoothing().next_target(current_target=100, observed_ratio=300, lookback_period=0) == 300

    def test_strategy_lookup(self):
        assert isinstance(get_smoothing_strategy("EMA"), EmaTargetSmoothing)
        assert isinstance(get_smoothing_strategy("fixed"), FixedTargetSmoothing)
        with pytest.raises(ValueError):
            get_smoothing_strategy("median")
