from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Hashable, Iterator

from alphix.application.dto.rehypothecation import CurrencyOutput, VaultOutput
from alphix.application.ports.host_pool_port import HostPoolPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort, YieldSourcePort
from alphix.domain.entities.pool import Pool, ProtocolSettings
from alphix.domain.entities.rehypothecation import CurrencyAccrual, CurrencyLedger, VaultState
from alphix.domain.exceptions import (
    InvalidYieldSourceError,
    PoolNotConfiguredError,
    ReentrancyError,
    YieldSourceNotSetError,
)
from alphix.domain.services.ratio_math import Rounding
from alphix.domain.services.share_accounting import (
    accrue_yield_tax,
    initial_deposit_amounts,
    proportional_amounts,
)

from .pool_common import load_bound_pool


logger = logging.getLogger(__name__)


class FundMoves:
    """
    Undo log for token and yield-source calls made inside a state transaction.

    The state store only rolls back its own writes. Each external move records
    how to reverse it; if the transaction fails the moves are reversed newest
    first and the original error propagates.
    """

    def __init__(self):
        self._undo: dict[Hashable, Callable[[], object]] = {}

    def record(self, key: Hashable, undo: Callable[[], object]) -> None:
        self._undo.pop(key, None)
        self._undo[key] = undo

    def forget(self, key: Hashable) -> None:
        self._undo.pop(key, None)

    @contextmanager
    def unwind_on_error(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            for key, undo in reversed(list(self._undo.items())):
                try:
                    undo()
                except Exception:
                    logger.exception("fund_moves: undo_failed step=%s", key)
            raise
        finally:
            self._undo.clear()


def load_vault(state_port: PoolStatePort) -> tuple[ProtocolSettings, Pool, VaultState]:
    protocol, pool = load_bound_pool(state_port)
    vault = state_port.get_vault(pool_id=pool.pool_id)
    if vault is None:
        raise PoolNotConfiguredError("Rehypothecation vault is not initialized.")
    return protocol, pool, vault


def resolve_yield_source(
    yield_sources: YieldSourceDirectoryPort,
    ledger: CurrencyLedger,
) -> YieldSourcePort | None:
    if ledger.yield_source is None:
        return None
    adapter = yield_sources.resolve(address=ledger.yield_source)
    if adapter is None:
        raise InvalidYieldSourceError(ledger.yield_source)
    return adapter


def require_yield_sources(
    vault: VaultState,
    yield_sources: YieldSourceDirectoryPort,
) -> tuple[YieldSourcePort, YieldSourcePort]:
    adapters = []
    for ledger in vault.ledgers():
        adapter = resolve_yield_source(yield_sources, ledger)
        if adapter is None:
            raise YieldSourceNotSetError(ledger.currency)
        adapters.append(adapter)
    return adapters[0], adapters[1]


def require_no_jit(vault: VaultState) -> None:
    if vault.jit_position is not None:
        raise ReentrancyError("Rehypothecated liquidity is deployed in an open swap.")


def accrue_vault(
    vault: VaultState,
    yield_sources: YieldSourceDirectoryPort,
) -> tuple[VaultState, CurrencyAccrual, CurrencyAccrual]:
    """Accrue yield tax on both currencies; JIT-deployed amounts count as held assets."""
    jit = vault.jit_position
    in_pool = (jit.amount0, jit.amount1) if jit is not None else (0, 0)

    accruals = []
    for ledger, deployed in zip(vault.ledgers(), in_pool):
        adapter = resolve_yield_source(yield_sources, ledger)
        held = adapter.total_assets() if adapter is not None else 0
        accruals.append(
            accrue_yield_tax(
                ledger,
                total_assets=held + deployed,
                yield_tax_pips=vault.config.yield_tax_pips,
            )
        )
    accrued = replace(vault, currency0=accruals[0].ledger, currency1=accruals[1].ledger)
    return accrued, accruals[0], accruals[1]


def quote_add_amounts(
    *,
    shares: int,
    pool: Pool,
    vault: VaultState,
    accrual0: CurrencyAccrual,
    accrual1: CurrencyAccrual,
    host_port: HostPoolPort,
) -> tuple[int, int]:
    if vault.total_supply == 0:
        slot0 = host_port.get_slot0(pool_id=pool.pool_id)
        return initial_deposit_amounts(
            shares=shares,
            sqrt_price_x96=slot0.sqrt_price_x96,
            tick_lower=vault.config.tick_lower,
            tick_upper=vault.config.tick_upper,
        )
    return proportional_amounts(
        shares=shares,
        total_supply=vault.total_supply,
        net_assets0=accrual0.net_assets,
        net_assets1=accrual1.net_assets,
        rounding=Rounding.UP,
    )


def build_vault_output(
    vault: VaultState,
    yield_sources: YieldSourceDirectoryPort,
    *,
    holder: str | None = None,
) -> VaultOutput:
    accrued, accrual0, accrual1 = accrue_vault(vault, yield_sources)

    def _currency(ledger: CurrencyLedger, accrual: CurrencyAccrual) -> CurrencyOutput:
        return CurrencyOutput(
            currency=ledger.currency,
            yield_source=ledger.yield_source,
            amount_in_yield_source=accrual.total_assets,
            accumulated_tax=ledger.accumulated_tax,
        )

    return VaultOutput(
        pool_id=accrued.pool_id,
        tick_lower=accrued.config.tick_lower,
        tick_upper=accrued.config.tick_upper,
        yield_tax_pips=accrued.config.yield_tax_pips,
        yield_treasury=accrued.config.yield_treasury,
        total_supply=accrued.total_supply,
        currency0=_currency(accrued.currency0, accrual0),
        currency1=_currency(accrued.currency1, accrual1),
        caller_balance=accrued.balance_of(holder) if holder else None,
    )
