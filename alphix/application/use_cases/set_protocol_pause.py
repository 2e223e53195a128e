from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.pool import SetProtocolPauseInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import ProtocolPauseChanged


logger = logging.getLogger(__name__)


class SetProtocolPauseUseCase:
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

    def execute(self, command: SetProtocolPauseInput) -> bool:
        self._access_gate.require(capability="pool_owner", caller=command.caller)

        def _tx(state_port: PoolStatePort) -> None:
            protocol = state_port.get_protocol_settings()
            state_port.save_protocol_settings(settings=replace(protocol, paused=command.paused))

        self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(ProtocolPauseChanged(paused=command.paused))
        logger.info("set_protocol_pause: paused=%s", command.paused)
        return command.paused
