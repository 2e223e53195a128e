from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial

from alphix.application.dto.rehypothecation import SetYieldSourceInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort, YieldSourcePort
from alphix.domain.entities.events import YieldSourceUpdated
from alphix.domain.exceptions import (
    InvalidParameterError,
    InvalidYieldSourceError,
    YieldSourceMigrationError,
)
from alphix.domain.services.ratio_math import BPS_DENOMINATOR, mul_div
from alphix.domain.services.rehypothecation_config import is_empty_address, is_native
from alphix.domain.services.share_accounting import net_assets

from .pool_common import bound_pool_id
from .reentrancy import ReentrancyGuard
from .vault_common import FundMoves, accrue_vault, load_vault, require_no_jit, resolve_yield_source


logger = logging.getLogger(__name__)


class SetYieldSourceUseCase:
    """Points a currency at a new yield source, moving the tracked balance across."""

    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        access_gate: AccessGatePort,
        yield_sources: YieldSourceDirectoryPort,
        event_sink: EventSinkPort,
        guard: ReentrancyGuard,
        slippage_tolerance_bps: int,
    ):
        self._state_port = state_port
        self._access_gate = access_gate
        self._yield_sources = yield_sources
        self._event_sink = event_sink
        self._guard = guard
        self._slippage_tolerance_bps = slippage_tolerance_bps

    def execute(self, command: SetYieldSourceInput) -> str:
        self._access_gate.require(capability="yield_manager", caller=command.caller)

        new_address = command.yield_source
        if is_empty_address(new_address) or is_native(command.currency):
            raise InvalidYieldSourceError(new_address)
        new_adapter = self._yield_sources.resolve(address=new_address)
        if new_adapter is None or new_adapter.asset.lower() != command.currency.lower():
            raise InvalidYieldSourceError(new_address)

        pool_id = bound_pool_id(self._state_port)
        moves = FundMoves()

        def _tx(state_port: PoolStatePort) -> str | None:
            _, _, vault = load_vault(state_port)
            require_no_jit(vault)

            if vault.currency0.currency.lower() == command.currency.lower():
                slot = 0
            elif vault.currency1.currency.lower() == command.currency.lower():
                slot = 1
            else:
                raise InvalidParameterError(f"Currency {command.currency} is not part of the pool.")

            # Settle tax against the old source before its balance moves.
            vault, _, _ = accrue_vault(vault, self._yield_sources)
            ledger = vault.ledgers()[slot]
            old_address = ledger.yield_source
            old_adapter = resolve_yield_source(self._yield_sources, ledger)

            if old_address is not None and old_address.lower() == new_address.lower():
                return old_address

            moved = old_adapter.total_assets() if old_adapter is not None else 0
            # Reject on the quoted entry cost before any balance leaves the old source.
            if moved > 0:
                self._check_slippage(
                    moved=moved,
                    landed=new_adapter.preview_deposit(moved),
                    currency=ledger.currency,
                    quoted=True,
                )

            baseline = new_adapter.total_assets()
            if moved > 0:
                received = old_adapter.withdraw(moved)
                moves.record("withdraw_old", partial(old_adapter.deposit, received))
                if received > 0:
                    new_adapter.deposit(received)
                    moves.forget("withdraw_old")
                    moves.record(
                        "deposit_new",
                        partial(_move_back, new_adapter, old_adapter, baseline),
                    )
                self._check_slippage(
                    moved=moved,
                    landed=new_adapter.total_assets() - baseline,
                    currency=ledger.currency,
                )

            landed = new_adapter.total_assets()

            updated = replace(
                ledger,
                yield_source=new_address,
                last_accounted_assets=net_assets(landed, ledger.accumulated_tax),
            )
            if slot == 0:
                vault = replace(vault, currency0=updated)
            else:
                vault = replace(vault, currency1=updated)
            state_port.save_vault(vault=vault)
            logger.info(
                "set_yield_source: migrated pool=%s currency=%s old=%s new=%s moved=%s landed=%s",
                pool_id,
                ledger.currency,
                old_address,
                new_address,
                moved,
                landed,
            )
            return old_address

        with self._guard.enter(pool_id):
            with moves.unwind_on_error():
                old_address = self._state_port.execute_in_transaction(_tx)
            self._event_sink.emit(
                YieldSourceUpdated(
                    pool_id=pool_id,
                    currency=command.currency,
                    old_yield_source=old_address,
                    new_yield_source=new_address,
                )
            )
        return new_address

    def _check_slippage(self, *, moved: int, landed: int, currency: str, quoted: bool = False) -> None:
        if landed >= moved:
            return
        lost = moved - landed
        tolerance = mul_div(moved, self._slippage_tolerance_bps, BPS_DENOMINATOR)
        if lost > tolerance:
            raise YieldSourceMigrationError(
                f"Migration of {currency} lost {lost} of {moved} (tolerance {tolerance})."
            )
        if quoted:
            return
        logger.warning(
            "set_yield_source: migration_slippage currency=%s moved=%s landed=%s lost=%s",
            currency,
            moved,
            landed,
            lost,
        )


def _move_back(source: YieldSourcePort, target: YieldSourcePort, baseline: int) -> None:
    """Return whatever ``source`` gained above ``baseline`` to ``target``."""
    gained = source.total_assets() - baseline
    if gained <= 0:
        return
    returned = source.withdraw(gained)
    if returned > 0:
        target.deposit(returned)
    logger.warning(
        "set_yield_source: migration_reverted from=%s to=%s amount=%s",
        source.address,
        target.address,
        returned,
    )
