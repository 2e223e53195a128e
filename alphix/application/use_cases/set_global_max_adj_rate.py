from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.fee import SetGlobalMaxAdjRateInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import GlobalMaxAdjRateUpdated
from alphix.domain.services.dynamic_fee import validate_global_max_adj_rate


logger = logging.getLogger(__name__)


class SetGlobalMaxAdjRateUseCase:
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

    def execute(self, command: SetGlobalMaxAdjRateInput) -> int:
        self._access_gate.require(capability="pool_owner", caller=command.caller)
        validate_global_max_adj_rate(command.rate)

        def _tx(state_port: PoolStatePort) -> int:
            protocol = state_port.get_protocol_settings()
            state_port.save_protocol_settings(
                settings=replace(protocol, global_max_adj_rate=command.rate)
            )
            return protocol.global_max_adj_rate

        old_rate = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(GlobalMaxAdjRateUpdated(old_rate=old_rate, new_rate=command.rate))
        logger.info("set_global_max_adj_rate: updated old_rate=%s new_rate=%s", old_rate, command.rate)
        return command.rate
