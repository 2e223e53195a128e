from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.fee import SetPoolParamsInput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import PoolParamsUpdated
from alphix.domain.entities.fee import PoolParams
from alphix.domain.services.dynamic_fee import validate_params

from .pool_common import load_bound_pool


logger = logging.getLogger(__name__)


class SetPoolParamsUseCase:
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

    def execute(self, command: SetPoolParamsInput) -> PoolParams:
        self._access_gate.require(capability="pool_owner", caller=command.caller)
        validate_params(command.params)

        def _tx(state_port: PoolStatePort) -> str:
            _, pool = load_bound_pool(state_port)
            state_port.save_pool(pool=replace(pool, params=command.params))
            return pool.pool_id

        pool_id = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(PoolParamsUpdated(pool_id=pool_id))

        fee = self._state_port.get_pool(pool_id=pool_id).fee_state.current_fee
        if fee < command.params.min_fee or fee > command.params.max_fee:
            # Tolerated until the next poke clamps it.
            logger.warning(
                "set_pool_params: current_fee_out_of_bounds pool=%s fee=%s min_fee=%s max_fee=%s",
                pool_id,
                fee,
                command.params.min_fee,
                command.params.max_fee,
            )
        logger.info("set_pool_params: updated pool=%s", pool_id)
        return command.params
