from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial

from alphix.application.dto.rehypothecation import LiquidityAmountsOutput, LiquidityInput
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.host_pool_port import TokenSettlementPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.entities.events import LiquidityRemoved
from alphix.domain.exceptions import InsufficientSharesError
from alphix.domain.services.pool_lifecycle import require_not_paused
from alphix.domain.services.share_accounting import (
    burn_shares,
    preview_remove_amounts,
    record_withdrawal,
    require_shares,
)

from .pool_common import bound_pool_id
from .reentrancy import ReentrancyGuard
from .vault_common import FundMoves, accrue_vault, load_vault, require_no_jit, resolve_yield_source


logger = logging.getLogger(__name__)


class RemoveReHypothecatedLiquidityUseCase:
    """
    Burns shares and pays out the pro-rata slice of both yield sources.

    Allowed on an inactive pool so depositors can always exit; blocked only by
    the protocol-wide pause. Losses in a yield source simply shrink every
    holder's slice.
    """

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

    def execute(self, command: LiquidityInput) -> LiquidityAmountsOutput:
        require_shares(command.shares)
        pool_id = bound_pool_id(self._state_port)
        moves = FundMoves()

        def _tx(state_port: PoolStatePort) -> LiquidityAmountsOutput:
            protocol, _, vault = load_vault(state_port)
            require_not_paused(protocol)
            require_no_jit(vault)

            available = vault.balance_of(command.caller)
            if command.shares > available:
                raise InsufficientSharesError(command.shares, available)

            vault, accrual0, accrual1 = accrue_vault(vault, self._yield_sources)
            amount0, amount1 = preview_remove_amounts(
                shares=command.shares,
                total_supply=vault.total_supply,
                net_assets0=accrual0.net_assets,
                net_assets1=accrual1.net_assets,
            )
            vault = burn_shares(vault, command.caller, command.shares)

            # Both withdrawals complete before any token leaves the hook.
            received = []
            for slot, (ledger, amount) in enumerate(((vault.currency0, amount0), (vault.currency1, amount1))):
                adapter = resolve_yield_source(self._yield_sources, ledger)
                paid = 0
                if amount > 0 and adapter is not None:
                    paid = adapter.withdraw(amount)
                    moves.record(("withdraw", slot), partial(adapter.deposit, paid))
                received.append(paid)
            for ledger, paid in zip(vault.ledgers(), received):
                if paid > 0:
                    self._settlement.push(currency=ledger.currency, recipient=command.caller, amount=paid)

            vault = replace(
                vault,
                currency0=record_withdrawal(vault.currency0, amount0),
                currency1=record_withdrawal(vault.currency1, amount1),
            )
            state_port.save_vault(vault=vault)
            return LiquidityAmountsOutput(shares=command.shares, amount0=received[0], amount1=received[1])

        with self._guard.enter(pool_id):
            with moves.unwind_on_error():
                result = self._state_port.execute_in_transaction(_tx)
            self._event_sink.emit(
                LiquidityRemoved(
                    pool_id=pool_id,
                    depositor=command.caller,
                    shares=result.shares,
                    amount0=result.amount0,
                    amount1=result.amount1,
                )
            )

        logger.info(
            "remove_rehypothecated_liquidity: pool=%s depositor=%s shares=%s amount0=%s amount1=%s",
            pool_id,
            command.caller,
            result.shares,
            result.amount0,
            result.amount1,
        )
        return result
