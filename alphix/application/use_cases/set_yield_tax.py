from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.rehypothecation import SetYieldTaxInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.entities.events import YieldTaxUpdated
from alphix.domain.services.rehypothecation_config import validate_yield_tax

from .vault_common import accrue_vault, load_vault, require_no_jit


logger = logging.getLogger(__name__)


class SetYieldTaxUseCase:
    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        access_gate: AccessGatePort,
        yield_sources: YieldSourceDirectoryPort,
        event_sink: EventSinkPort,
    ):
        self._state_port = state_port
        self._access_gate = access_gate
        self._yield_sources = yield_sources
        self._event_sink = event_sink

    def execute(self, command: SetYieldTaxInput) -> int:
        self._access_gate.require(capability="yield_manager", caller=command.caller)
        validate_yield_tax(command.yield_tax_pips)

        def _tx(state_port: PoolStatePort) -> str:
            _, pool, vault = load_vault(state_port)
            require_no_jit(vault)
            # Yield earned so far is taxed at the rate in force while it accrued.
            vault, _, _ = accrue_vault(vault, self._yield_sources)
            config = replace(vault.config, yield_tax_pips=command.yield_tax_pips)
            state_port.save_vault(vault=replace(vault, config=config))
            return pool.pool_id

        pool_id = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(YieldTaxUpdated(pool_id=pool_id, yield_tax_pips=command.yield_tax_pips))
        logger.info("set_yield_tax: pool=%s yield_tax_pips=%s", pool_id, command.yield_tax_pips)
        return command.yield_tax_pips
