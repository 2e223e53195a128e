from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.rehypothecation import SetYieldTreasuryInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import YieldTreasuryUpdated
from alphix.domain.services.rehypothecation_config import validate_treasury

from .vault_common import load_vault


logger = logging.getLogger(__name__)


class SetYieldTreasuryUseCase:
    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        access_gate: AccessGatePort,
        event_sink: EventSinkPort,
    ):
        self._state_port = state_port
        self._access_gate = access_gate
        self._event_sink = event_sink

    def execute(self, command: SetYieldTreasuryInput) -> str:
        self._access_gate.require(capability="yield_manager", caller=command.caller)
        treasury = validate_treasury(command.yield_treasury)

        def _tx(state_port: PoolStatePort) -> str:
            _, pool, vault = load_vault(state_port)
            config = replace(vault.config, yield_treasury=treasury)
            state_port.save_vault(vault=replace(vault, config=config))
            return pool.pool_id

        pool_id = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(YieldTreasuryUpdated(pool_id=pool_id, yield_treasury=treasury))
        logger.info("set_yield_treasury: pool=%s treasury=%s", pool_id, treasury)
        return treasury
