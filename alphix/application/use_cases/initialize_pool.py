from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.pool import InitializePoolInput, PoolOutput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.clock_port import ClockPort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.host_pool_port import HostPoolPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import PoolConfigured
from alphix.domain.entities.fee import FeeState
from alphix.domain.entities.pool import Pool, PoolConfig, PoolStatus
from alphix.domain.exceptions import (
    InvalidAddressError,
    LogicNotSetError,
    PoolAlreadyConfiguredError,
)
from alphix.domain.services.dynamic_fee import validate_initial_state
from alphix.domain.services.pool_defaults import default_params_for
from alphix.domain.services.pool_lifecycle import compute_pool_id, require_not_paused
from alphix.domain.services.rehypothecation_config import default_vault_state, is_empty_address

from .pool_common import build_pool_output


logger = logging.getLogger(__name__)


class InitializePoolUseCase:
    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        host_port: HostPoolPort,
        access_gate: AccessGatePort,
        clock: ClockPort,
        event_sink: EventSinkPort,
        hook_address: str,
        logic_address: str | None,
    ):
        self._state_port = state_port
        self._host_port = host_port
        self._access_gate = access_gate
        self._clock = clock
        self._event_sink = event_sink
        self._hook_address = hook_address
        self._logic_address = logic_address

    def execute(self, command: InitializePoolInput) -> PoolOutput:
        self._access_gate.require(capability="pool_owner", caller=command.caller)

        if is_empty_address(self._logic_address):
            raise LogicNotSetError("No logic is wired to the hook.")
        if is_empty_address(command.key.hooks) or command.key.hooks.lower() != self._hook_address.lower():
            raise InvalidAddressError(command.key.hooks)

        protocol = self._state_port.get_protocol_settings()
        require_not_paused(protocol)
        if protocol.pool_id is not None:
            raise PoolAlreadyConfiguredError(f"Hook already serves pool {protocol.pool_id}.")

        params = command.params or default_params_for(command.pool_type)
        validate_initial_state(
            initial_fee=command.initial_fee,
            initial_target_ratio=command.initial_target_ratio,
            params=params,
        )

        pool_id = compute_pool_id(command.key)
        self._host_port.initialize(
            key=command.key,
            sqrt_price_x96=command.sqrt_price_x96,
            sender=self._hook_address,
        )

        def _tx(state_port: PoolStatePort) -> PoolOutput:
            current = state_port.get_protocol_settings()
            if current.pool_id is not None:
                raise PoolAlreadyConfiguredError(f"Hook already serves pool {current.pool_id}.")

            pool = Pool(
                pool_id=pool_id,
                key=command.key,
                config=PoolConfig(
                    initial_fee=command.initial_fee,
                    initial_target_ratio=command.initial_target_ratio,
                    pool_type=command.pool_type,
                    is_configured=True,
                ),
                params=params,
                fee_state=FeeState(
                    current_fee=command.initial_fee,
                    current_target_ratio=command.initial_target_ratio,
                    last_adjustment_timestamp=self._clock.now(),
                ),
                status=PoolStatus.ACTIVE,
            )
            protocol_after = replace(current, pool_id=pool_id)
            state_port.save_pool(pool=pool)
            state_port.save_protocol_settings(settings=protocol_after)
            state_port.save_vault(
                vault=default_vault_state(
                    pool_id=pool_id,
                    currency0=command.key.currency0,
                    currency1=command.key.currency1,
                    tick_spacing=command.key.tick_spacing,
                )
            )
            return build_pool_output(pool, protocol_after)

        output = self._state_port.execute_in_transaction(_tx)
        self._event_sink.emit(
            PoolConfigured(
                pool_id=pool_id,
                initial_fee=command.initial_fee,
                initial_target_ratio=command.initial_target_ratio,
                pool_type=command.pool_type,
            )
        )
        logger.info(
            "initialize_pool: configured pool=%s pool_type=%s initial_fee=%s initial_target_ratio=%s",
            pool_id,
            command.pool_type,
            command.initial_fee,
            command.initial_target_ratio,
        )
        return output
