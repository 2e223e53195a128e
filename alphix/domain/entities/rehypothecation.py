from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class ReHypothecationConfig:
    tick_lower: int
    tick_upper: int
    yield_tax_pips: int
    yield_treasury: str | None


@dataclass(frozen=True)
class CurrencyLedger:
    currency: str
    yield_source: str | None
    last_accounted_assets: int
    accumulated_tax: int


@dataclass(frozen=True)
class JitPosition:
    amount0: int
    amount1: int


@dataclass(frozen=True)
class VaultState:
    pool_id: str
    config: ReHypothecationConfig
    total_supply: int
    currency0: CurrencyLedger
    currency1: CurrencyLedger
    balances: Mapping[str, int] = field(default_factory=dict)
    jit_position: JitPosition | None = None

    def balance_of(self, holder: str) -> int:
        return int(self.balances.get(holder, 0))

    def ledgers(self) -> tuple[CurrencyLedger, CurrencyLedger]:
        return self.currency0, self.currency1


@dataclass(frozen=True)
class CurrencyAccrual:
    """Result of bringing one currency's ledger up to date with its yield source."""

    ledger: CurrencyLedger
    total_assets: int
    net_assets: int
    yield_amount: int
    tax: int
