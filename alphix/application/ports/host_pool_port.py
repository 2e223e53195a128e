from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from alphix.domain.entities.pool import PoolKey


@dataclass(frozen=True)
class Slot0:
    sqrt_price_x96: int
    tick: int


class HostPoolPort(Protocol):
    """Pool-management runtime that owns the pools and runs the callbacks."""

    def initialize(self, *, key: PoolKey, sqrt_price_x96: int, sender: str) -> int:
        ...

    def get_slot0(self, *, pool_id: str) -> Slot0:
        ...

    def add_jit_liquidity(
        self,
        *,
        pool_id: str,
        tick_lower: int,
        tick_upper: int,
        amount0: int,
        amount1: int,
    ) -> None:
        ...

    def remove_jit_liquidity(self, *, pool_id: str) -> tuple[int, int]:
        ...


class TokenSettlementPort(Protocol):
    def pull(self, *, currency: str, payer: str, amount: int) -> None:
        ...

    def push(self, *, currency: str, recipient: str, amount: int) -> None:
        ...
