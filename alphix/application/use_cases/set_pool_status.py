from __future__ import annotations

import logging

from alphix.application.dto.pool import PoolOutput, SetPoolStatusInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import PoolActivated, PoolDeactivated
from alphix.domain.entities.pool import PoolStatus
from alphix.domain.exceptions import PoolNotConfiguredError
from alphix.domain.services.pool_lifecycle import transition

from .pool_common import build_pool_output


logger = logging.getLogger(__name__)


class SetPoolStatusUseCase:
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

    def execute(self, command: SetPoolStatusInput) -> PoolOutput:
        self._access_gate.require(capability="pool_owner", caller=command.caller)
        target = PoolStatus.ACTIVE if command.active else PoolStatus.INACTIVE

        def _tx(state_port: PoolStatePort) -> PoolOutput:
            protocol = state_port.get_protocol_settings()
            if protocol.pool_id is None:
                raise PoolNotConfiguredError("No pool is bound to this hook.")
            pool = transition(state_port.get_pool(pool_id=protocol.pool_id), target)
            state_port.save_pool(pool=pool)
            return build_pool_output(pool, protocol)

        output = self._state_port.execute_in_transaction(_tx)
        if command.active:
            self._event_sink.emit(PoolActivated(pool_id=output.pool_id))
        else:
            self._event_sink.emit(PoolDeactivated(pool_id=output.pool_id))
        logger.info("set_pool_status: pool=%s status=%s", output.pool_id, output.status)
        return output
