from __future__ import annotations

from dataclasses import dataclass

from alphix.domain.entities.fee import PoolParams


@dataclass(frozen=True)
class PokeFeeInput:
    caller: str
    current_ratio: int


@dataclass(frozen=True)
class PokeFeeOutput:
    pool_id: str
    old_fee: int
    new_fee: int
    old_target_ratio: int
    new_target_ratio: int
    timestamp: int
    within_tolerance: bool


@dataclass(frozen=True)
class SetPoolParamsInput:
    caller: str
    params: PoolParams


@dataclass(frozen=True)
class SetGlobalMaxAdjRateInput:
    caller: str
    rate: int


@dataclass(frozen=True)
class FeeOutput:
    pool_id: str
    current_fee: int
    current_target_ratio: int
    last_adjustment_timestamp: int
    next_adjustment_time: int
    global_max_adj_rate: int
    params: PoolParams
