from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial

from alphix.application.dto.hook import (
    AFTER_ADD_LIQUIDITY,
    AFTER_INITIALIZE,
    AFTER_REMOVE_LIQUIDITY,
    AFTER_SWAP,
    BEFORE_ADD_LIQUIDITY,
    BEFORE_INITIALIZE,
    BEFORE_REMOVE_LIQUIDITY,
    BEFORE_SWAP,
    BeforeSwapOutput,
    ModifyLiquidityParams,
    SwapParams,
)
from alphix.application.ports.host_pool_port import HostPoolPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.entities.pool import Pool, PoolKey
from alphix.domain.entities.rehypothecation import JitPosition
from alphix.domain.exceptions import (
    InvalidAddressError,
    InvalidCallerError,
    PoolAlreadyConfiguredError,
    PoolNotConfiguredError,
)
from alphix.domain.services.dynamic_fee import OVERRIDE_FEE_FLAG
from alphix.domain.services.pool_lifecycle import compute_pool_id, require_active, require_not_paused
from alphix.domain.services.share_accounting import net_assets
from alphix.domain.services.univ3_math import tick_in_range

from .reentrancy import ReentrancyGuard
from .vault_common import FundMoves, accrue_vault, resolve_yield_source


logger = logging.getLogger(__name__)


class HookCallbacksUseCase:
    """
    Lifecycle callbacks invoked by the host pool-management runtime.

    Every callback must come from the bound host runtime address. Swap
    callbacks return the dynamic fee as an override and, when the pool's
    tick sits inside the rehypothecation window, move the vault's capital
    into the pool for the duration of the swap.
    """

    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        host_port: HostPoolPort,
        yield_sources: YieldSourceDirectoryPort,
        guard: ReentrancyGuard,
        pool_manager_address: str,
        hook_address: str,
    ):
        self._state_port = state_port
        self._host_port = host_port
        self._yield_sources = yield_sources
        self._guard = guard
        self._pool_manager_address = pool_manager_address
        self._hook_address = hook_address

    def before_initialize(self, *, caller: str, sender: str, key: PoolKey, sqrt_price_x96: int) -> str:
        self._require_pool_manager(caller)
        protocol = self._state_port.get_protocol_settings()
        require_not_paused(protocol)
        if sender.lower() != self._hook_address.lower():
            raise InvalidCallerError(sender)
        if key.hooks.lower() != self._hook_address.lower():
            raise InvalidAddressError(key.hooks)
        if protocol.pool_id is not None:
            raise PoolAlreadyConfiguredError(f"Hook already serves pool {protocol.pool_id}.")
        logger.debug(
            "hook_callbacks: before_initialize pool=%s sqrt_price_x96=%s",
            compute_pool_id(key),
            sqrt_price_x96,
        )
        return BEFORE_INITIALIZE

    def after_initialize(self, *, caller: str, sender: str, key: PoolKey, sqrt_price_x96: int, tick: int) -> str:
        self._require_pool_manager(caller)
        require_not_paused(self._state_port.get_protocol_settings())
        logger.debug("hook_callbacks: after_initialize pool=%s tick=%s", compute_pool_id(key), tick)
        return AFTER_INITIALIZE

    def before_add_liquidity(self, *, caller: str, key: PoolKey, params: ModifyLiquidityParams) -> str:
        self._require_active_pool(caller, key)
        return BEFORE_ADD_LIQUIDITY

    def after_add_liquidity(self, *, caller: str, key: PoolKey, params: ModifyLiquidityParams) -> str:
        self._require_active_pool(caller, key)
        return AFTER_ADD_LIQUIDITY

    def before_remove_liquidity(self, *, caller: str, key: PoolKey, params: ModifyLiquidityParams) -> str:
        self._require_active_pool(caller, key)
        return BEFORE_REMOVE_LIQUIDITY

    def after_remove_liquidity(self, *, caller: str, key: PoolKey, params: ModifyLiquidityParams) -> str:
        self._require_active_pool(caller, key)
        return AFTER_REMOVE_LIQUIDITY

    def before_swap(self, *, caller: str, key: PoolKey, params: SwapParams) -> BeforeSwapOutput:
        pool = self._require_active_pool(caller, key)
        moves = FundMoves()
        with self._guard.enter(pool.pool_id):
            with moves.unwind_on_error():
                self._state_port.execute_in_transaction(
                    lambda state_port: self._deploy_jit(state_port, pool, moves)
                )
        return BeforeSwapOutput(
            selector=BEFORE_SWAP,
            fee_override=pool.fee_state.current_fee | OVERRIDE_FEE_FLAG,
        )

    def after_swap(self, *, caller: str, key: PoolKey, params: SwapParams) -> str:
        pool = self._require_active_pool(caller, key)
        with self._guard.enter(pool.pool_id):
            self._state_port.execute_in_transaction(lambda state_port: self._reclaim_jit(state_port, pool))
        return AFTER_SWAP

    def _deploy_jit(self, state_port: PoolStatePort, pool: Pool, moves: FundMoves) -> None:
        vault = state_port.get_vault(pool_id=pool.pool_id)
        if vault is None or vault.total_supply == 0 or vault.jit_position is not None:
            return

        slot0 = self._host_port.get_slot0(pool_id=pool.pool_id)
        if not tick_in_range(slot0.tick, vault.config.tick_lower, vault.config.tick_upper):
            logger.debug(
                "hook_callbacks: jit_skipped_out_of_range pool=%s tick=%s range=[%s,%s)",
                pool.pool_id,
                slot0.tick,
                vault.config.tick_lower,
                vault.config.tick_upper,
            )
            return

        vault, accrual0, accrual1 = accrue_vault(vault, self._yield_sources)
        withdrawn = []
        for slot, (ledger, accrual) in enumerate(((vault.currency0, accrual0), (vault.currency1, accrual1))):
            adapter = resolve_yield_source(self._yield_sources, ledger)
            if adapter is None or accrual.net_assets == 0:
                withdrawn.append(0)
                continue
            amount = adapter.withdraw(accrual.net_assets)
            moves.record(("withdraw", slot), partial(adapter.deposit, amount))
            withdrawn.append(amount)

        if not any(withdrawn):
            state_port.save_vault(vault=vault)
            return

        self._host_port.add_jit_liquidity(
            pool_id=pool.pool_id,
            tick_lower=vault.config.tick_lower,
            tick_upper=vault.config.tick_upper,
            amount0=withdrawn[0],
            amount1=withdrawn[1],
        )
        moves.record("jit", partial(self._host_port.remove_jit_liquidity, pool_id=pool.pool_id))
        state_port.save_vault(
            vault=replace(vault, jit_position=JitPosition(amount0=withdrawn[0], amount1=withdrawn[1]))
        )
        logger.info(
            "hook_callbacks: jit_deployed pool=%s tick=%s amount0=%s amount1=%s",
            pool.pool_id,
            slot0.tick,
            withdrawn[0],
            withdrawn[1],
        )

    def _reclaim_jit(self, state_port: PoolStatePort, pool: Pool) -> None:
        vault = state_port.get_vault(pool_id=pool.pool_id)
        if vault is None or vault.jit_position is None:
            return

        returned = self._host_port.remove_jit_liquidity(pool_id=pool.pool_id)
        ledgers = []
        for ledger, amount in zip(vault.ledgers(), returned):
            adapter = resolve_yield_source(self._yield_sources, ledger)
            if adapter is None:
                ledgers.append(ledger)
                continue
            if amount > 0:
                adapter.deposit(amount)
            # Swap proceeds are principal: the new baseline is whatever was redeposited.
            ledgers.append(
                replace(
                    ledger,
                    last_accounted_assets=net_assets(adapter.total_assets(), ledger.accumulated_tax),
                )
            )

        state_port.save_vault(
            vault=replace(vault, currency0=ledgers[0], currency1=ledgers[1], jit_position=None)
        )
        logger.info(
            "hook_callbacks: jit_reclaimed pool=%s amount0=%s amount1=%s",
            pool.pool_id,
            returned[0],
            returned[1],
        )

    def _require_pool_manager(self, caller: str) -> None:
        if caller.lower() != self._pool_manager_address.lower():
            raise InvalidCallerError(caller)

    def _require_active_pool(self, caller: str, key: PoolKey) -> Pool:
        self._require_pool_manager(caller)
        protocol = self._state_port.get_protocol_settings()
        require_not_paused(protocol)
        pool_id = compute_pool_id(key)
        if protocol.pool_id != pool_id:
            raise PoolNotConfiguredError(f"Pool {pool_id} is not served by this hook.")
        return require_active(self._state_port.get_pool(pool_id=pool_id), protocol)
