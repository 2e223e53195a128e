from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolParams:
    min_fee: int
    max_fee: int
    base_max_fee_delta: int
    lookback_period: int
    min_period: int
    ratio_tolerance: int
    linear_slope: int
    max_current_ratio: int
    lower_side_factor: int
    upper_side_factor: int


@dataclass(frozen=True)
class FeeState:
    current_fee: int
    current_target_ratio: int
    last_adjustment_timestamp: int


@dataclass(frozen=True)
class FeeAdjustment:
    old_fee: int
    new_fee: int
    old_target_ratio: int
    new_target_ratio: int
    timestamp: int
    within_tolerance: bool

    def to_fee_state(self) -> FeeState:
        return FeeState(
            current_fee=self.new_fee,
            current_target_ratio=self.new_target_ratio,
            last_adjustment_timestamp=self.timestamp,
        )
