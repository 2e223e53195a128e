from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from alphix.domain.entities.fee import FeeState, PoolParams


PoolType = Literal["stable", "standard", "volatile"]

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_CURRENCY = ZERO_ADDRESS


class PoolStatus(str, Enum):
    UNCONFIGURED = "unconfigured"
    INACTIVE = "inactive"
    ACTIVE = "active"


class LifecycleState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED_INACTIVE = "configured_inactive"
    CONFIGURED_ACTIVE = "configured_active"
    PAUSED_OVERRIDE = "paused_override"


@dataclass(frozen=True)
class PoolKey:
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str


@dataclass(frozen=True)
class PoolConfig:
    initial_fee: int
    initial_target_ratio: int
    pool_type: PoolType
    is_configured: bool


@dataclass(frozen=True)
class Pool:
    pool_id: str
    key: PoolKey
    config: PoolConfig
    params: PoolParams
    fee_state: FeeState
    status: PoolStatus


@dataclass(frozen=True)
class ProtocolSettings:
    """Per-deployment values shared by every pool the hook serves."""

    global_max_adj_rate: int
    paused: bool
    pool_id: str | None
