from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial

from alphix.application.dto.rehypothecation import CollectTaxOutput
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.host_pool_port import TokenSettlementPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.entities.events import AccumulatedTaxCollected

from .pool_common import bound_pool_id
from .reentrancy import ReentrancyGuard
from .vault_common import FundMoves, accrue_vault, load_vault, require_no_jit, resolve_yield_source


logger = logging.getLogger(__name__)


class CollectAccumulatedTaxUseCase:
    """Sweeps accrued yield tax to the treasury. Anyone may call it."""

    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        settlement: TokenSettlementPort,
        yield_sources: YieldSourceDirectoryPort,
        event_sink: EventSinkPort,
        guard: ReentrancyGuard,
    ):
        self._state_port = state_port
        self._settlement = settlement
        self._yield_sources = yield_sources
        self._event_sink = event_sink
        self._guard = guard

    def execute(self) -> CollectTaxOutput:
        pool_id = bound_pool_id(self._state_port)
        moves = FundMoves()

        def _tx(state_port: PoolStatePort) -> tuple[CollectTaxOutput, str | None]:
            _, _, vault = load_vault(state_port)
            require_no_jit(vault)
            vault, _, _ = accrue_vault(vault, self._yield_sources)

            treasury = vault.config.yield_treasury
            if not treasury:
                state_port.save_vault(vault=vault)
                logger.debug("collect_accumulated_tax: no_treasury pool=%s", pool_id)
                return CollectTaxOutput(collected0=0, collected1=0), None

            collected = []
            ledgers = []
            for slot, ledger in enumerate(vault.ledgers()):
                owed = ledger.accumulated_tax
                adapter = resolve_yield_source(self._yield_sources, ledger)
                if owed == 0 or adapter is None:
                    collected.append(0)
                    ledgers.append(ledger)
                    continue

                payable = min(owed, adapter.total_assets())
                if payable < owed:
                    logger.warning(
                        "collect_accumulated_tax: capped_by_assets pool=%s currency=%s owed=%s payable=%s",
                        pool_id,
                        ledger.currency,
                        owed,
                        payable,
                    )
                paid = adapter.withdraw(payable) if payable > 0 else 0
                if paid > 0:
                    moves.record(("withdraw", slot), partial(adapter.deposit, paid))
                collected.append(paid)
                ledgers.append(replace(ledger, accumulated_tax=owed - payable))

            for ledger, paid in zip(vault.ledgers(), collected):
                if paid > 0:
                    self._settlement.push(currency=ledger.currency, recipient=treasury, amount=paid)

            vault = replace(vault, currency0=ledgers[0], currency1=ledgers[1])
            state_port.save_vault(vault=vault)
            return CollectTaxOutput(collected0=collected[0], collected1=collected[1]), treasury

        with self._guard.enter(pool_id):
            with moves.unwind_on_error():
                result, treasury = self._state_port.execute_in_transaction(_tx)
            if treasury and (result.collected0 or result.collected1):
                self._event_sink.emit(
                    AccumulatedTaxCollected(
                        pool_id=pool_id,
                        treasury=treasury,
                        amount0=result.collected0,
                        amount1=result.collected1,
                    )
                )

        logger.info(
            "collect_accumulated_tax: pool=%s collected0=%s collected1=%s",
            pool_id,
            result.collected0,
            result.collected1,
        )
        return result
