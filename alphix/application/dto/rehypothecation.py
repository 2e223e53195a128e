from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LiquidityInput:
    caller: str
    shares: int


@dataclass(frozen=True)
class LiquidityAmountsOutput:
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class CollectTaxOutput:
    collected0: int
    collected1: int


@dataclass(frozen=True)
class SetYieldSourceInput:
    caller: str
    currency: str
    yield_source: str | None


@dataclass(frozen=True)
class SetTickRangeInput:
    caller: str
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class SetYieldTaxInput:
    caller: str
    yield_tax_pips: int


@dataclass(frozen=True)
class SetYieldTreasuryInput:
    caller: str
    yield_treasury: str | None


@dataclass(frozen=True)
class CurrencyOutput:
    currency: str
    yield_source: str | None
    amount_in_yield_source: int
    accumulated_tax: int


@dataclass(frozen=True)
class VaultOutput:
    pool_id: str
    tick_lower: int
    tick_upper: int
    yield_tax_pips: int
    yield_treasury: str | None
    total_supply: int
    currency0: CurrencyOutput
    currency1: CurrencyOutput
    caller_balance: int | None = None
