from __future__ import annotations

from dataclasses import dataclass

from alphix.domain.entities.fee import PoolParams
from alphix.domain.entities.pool import PoolKey, PoolType


@dataclass(frozen=True)
class InitializePoolInput:
    caller: str
    key: PoolKey
    initial_fee: int
    initial_target_ratio: int
    pool_type: PoolType
    sqrt_price_x96: int
    params: PoolParams | None = None


@dataclass(frozen=True)
class PoolOutput:
    pool_id: str
    pool_type: str
    status: str
    lifecycle_state: str
    current_fee: int
    current_target_ratio: int
    last_adjustment_timestamp: int


@dataclass(frozen=True)
class SetPoolStatusInput:
    caller: str
    active: bool


@dataclass(frozen=True)
class SetProtocolPauseInput:
    caller: str
    paused: bool
