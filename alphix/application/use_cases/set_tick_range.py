from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.rehypothecation import SetTickRangeInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import TickRangeUpdated
from alphix.domain.services.rehypothecation_config import validate_tick_range

from .vault_common import load_vault, require_no_jit


logger = logging.getLogger(__name__)


class SetTickRangeUseCase:
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

    def execute(self, command: SetTickRangeInput) -> tuple[int, int]:
        self._access_gate.require(capability="yield_manager", caller=command.caller)

        def _tx(state_port: PoolStatePort) -> str:
            _, pool, vault = load_vault(state_port)
            validate_tick_range(command.tick_lower, command.tick_upper, pool.key.tick_spacing)
            require_no_jit(vault)
            config = replace(vault.config, tick_lower=command.tick_lower, tick_upper=command.tick_upper)
            state_port.save_vault(vault=replace(vault, config=config))
            return pool.pool_id

        pool_id = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(
            TickRangeUpdated(pool_id=pool_id, tick_lower=command.tick_lower, tick_upper=command.tick_upper)
        )
        logger.info(
            "set_tick_range: pool=%s tick_lower=%s tick_upper=%s",
            pool_id,
            command.tick_lower,
            command.tick_upper,
        )
        return command.tick_lower, command.tick_upper
