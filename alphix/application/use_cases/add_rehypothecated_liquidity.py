from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial

from alphix.application.dto.rehypothecation import LiquidityAmountsOutput, LiquidityInput
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.host_pool_port import HostPoolPort, TokenSettlementPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.entities.events import LiquidityAdded
from alphix.domain.services.pool_lifecycle import require_active
from alphix.domain.services.share_accounting import mint_shares, record_deposit, require_shares

from .pool_common import bound_pool_id
from .reentrancy import ReentrancyGuard
from .vault_common import (
    FundMoves,
    accrue_vault,
    load_vault,
    quote_add_amounts,
    require_no_jit,
    require_yield_sources,
)


logger = logging.getLogger(__name__)


class AddReHypothecatedLiquidityUseCase:
    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        host_port: HostPoolPort,
        settlement: TokenSettlementPort,
        yield_sources: YieldSourceDirectoryPort,
        event_sink: EventSinkPort,
        guard: ReentrancyGuard,
    ):
        self._state_port = state_port
        self._host_port = host_port
        self._settlement = settlement
        self._yield_sources = yield_sources
        self._event_sink = event_sink
        self._guard = guard

    def execute(self, command: LiquidityInput) -> LiquidityAmountsOutput:
        require_shares(command.shares)
        pool_id = bound_pool_id(self._state_port)
        moves = FundMoves()

        def _tx(state_port: PoolStatePort) -> LiquidityAmountsOutput:
            protocol, pool, vault = load_vault(state_port)
            require_active(pool, protocol)
            require_no_jit(vault)
            adapter0, adapter1 = require_yield_sources(vault, self._yield_sources)

            # Accrue first so the new depositor neither pays for nor shares in earlier yield.
            vault, accrual0, accrual1 = accrue_vault(vault, self._yield_sources)
            amount0, amount1 = quote_add_amounts(
                shares=command.shares,
                pool=pool,
                vault=vault,
                accrual0=accrual0,
                accrual1=accrual1,
                host_port=self._host_port,
            )

            legs = ((vault.currency0, adapter0, amount0), (vault.currency1, adapter1, amount1))
            # Both pulls land before either deposit so a failed pull leaves no adapter balance behind.
            for slot, (ledger, _, amount) in enumerate(legs):
                if amount > 0:
                    self._settlement.pull(currency=ledger.currency, payer=command.caller, amount=amount)
                    moves.record(
                        ("pull", slot),
                        partial(
                            self._settlement.push,
                            currency=ledger.currency,
                            recipient=command.caller,
                            amount=amount,
                        ),
                    )
            for slot, (_, adapter, amount) in enumerate(legs):
                if amount > 0:
                    adapter.deposit(amount)
                    moves.record(("deposit", slot), partial(adapter.withdraw, amount))

            vault = replace(
                vault,
                currency0=record_deposit(vault.currency0, amount0),
                currency1=record_deposit(vault.currency1, amount1),
            )
            vault = mint_shares(vault, command.caller, command.shares)
            state_port.save_vault(vault=vault)
            return LiquidityAmountsOutput(shares=command.shares, amount0=amount0, amount1=amount1)

        with self._guard.enter(pool_id):
            with moves.unwind_on_error():
                result = self._state_port.execute_in_transaction(_tx)
            self._event_sink.emit(
                LiquidityAdded(
                    pool_id=pool_id,
                    depositor=command.caller,
                    shares=result.shares,
                    amount0=result.amount0,
                    amount1=result.amount1,
                )
            )

        logger.info(
            "add_rehypothecated_liquidity: pool=%s depositor=%s shares=%s amount0=%s amount1=%s",
            pool_id,
            command.caller,
            result.shares,
            result.amount0,
            result.amount1,
        )
        return result
