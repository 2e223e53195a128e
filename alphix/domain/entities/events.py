from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolConfigured:
    pool_id: str
    initial_fee: int
    initial_target_ratio: int
    pool_type: str


@dataclass(frozen=True)
class PoolActivated:
    pool_id: str


@dataclass(frozen=True)
class PoolDeactivated:
    pool_id: str


@dataclass(frozen=True)
class ProtocolPauseChanged:
    paused: bool


@dataclass(frozen=True)
class FeeUpdated:
    pool_id: str
    old_fee: int
    new_fee: int
    old_target_ratio: int
    new_target_ratio: int


@dataclass(frozen=True)
class PoolParamsUpdated:
    pool_id: str


@dataclass(frozen=True)
class GlobalMaxAdjRateUpdated:
    old_rate: int
    new_rate: int


@dataclass(frozen=True)
class YieldSourceUpdated:
    pool_id: str
    currency: str
    old_yield_source: str | None
    new_yield_source: str


@dataclass(frozen=True)
class TickRangeUpdated:
    pool_id: str
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class YieldTaxUpdated:
    pool_id: str
    yield_tax_pips: int


@dataclass(frozen=True)
class YieldTreasuryUpdated:
    pool_id: str
    yield_treasury: str


@dataclass(frozen=True)
class LiquidityAdded:
    pool_id: str
    depositor: str
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class LiquidityRemoved:
    pool_id: str
    depositor: str
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class AccumulatedTaxCollected:
    pool_id: str
    treasury: str
    amount0: int
    amount1: int
