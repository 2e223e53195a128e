from __future__ import annotations

import logging
from dataclasses import replace

from alphix.application.dto.fee import PokeFeeInput, PokeFeeOutput
from alphix.application.ports.access_gate_port import AccessGatePort
from alphix.application.ports.clock_port import ClockPort
from alphix.application.ports.event_sink_port import EventSinkPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.events import FeeUpdated
from alphix.domain.exceptions import InvalidRatioError
from alphix.domain.services.dynamic_fee import compute_fee_adjustment
from alphix.domain.services.pool_lifecycle import require_active
from alphix.domain.services.target_ratio_smoothing import TargetRatioSmoothing

from .pool_common import bound_pool_id, load_bound_pool
from .reentrancy import ReentrancyGuard


logger = logging.getLogger(__name__)


class PokeFeeUseCase:
    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        access_gate: AccessGatePort,
        clock: ClockPort,
        event_sink: EventSinkPort,
        smoothing: TargetRatioSmoothing,
        guard: ReentrancyGuard,
    ):
        self._state_port = state_port
        self._access_gate = access_gate
        self._clock = clock
        self._event_sink = event_sink
        self._smoothing = smoothing
        self._guard = guard

    def execute(self, command: PokeFeeInput) -> PokeFeeOutput:
        if command.current_ratio <= 0:
            raise InvalidRatioError(command.current_ratio)
        self._access_gate.require(capability="fee_poker", caller=command.caller)

        pool_id = bound_pool_id(self._state_port)

        def _tx(state_port: PoolStatePort) -> PokeFeeOutput:
            protocol, pool = load_bound_pool(state_port)
            require_active(pool, protocol)

            adjustment = compute_fee_adjustment(
                pool_id=pool.pool_id,
                fee_state=pool.fee_state,
                params=pool.params,
                current_ratio=command.current_ratio,
                global_max_adj_rate=protocol.global_max_adj_rate,
                now=self._clock.now(),
                smoothing=self._smoothing,
            )
            state_port.save_pool(pool=replace(pool, fee_state=adjustment.to_fee_state()))
            return PokeFeeOutput(
                pool_id=pool.pool_id,
                old_fee=adjustment.old_fee,
                new_fee=adjustment.new_fee,
                old_target_ratio=adjustment.old_target_ratio,
                new_target_ratio=adjustment.new_target_ratio,
                timestamp=adjustment.timestamp,
                within_tolerance=adjustment.within_tolerance,
            )

        with self._guard.enter(pool_id):
            result = self._state_port.execute_in_transaction(_tx)
            self._event_sink.emit(
                FeeUpdated(
                    pool_id=result.pool_id,
                    old_fee=result.old_fee,
                    new_fee=result.new_fee,
                    old_target_ratio=result.old_target_ratio,
                    new_target_ratio=result.new_target_ratio,
                )
            )
        if result.within_tolerance:
            logger.debug(
                "poke_fee: within_tolerance pool=%s ratio=%s target=%s",
                result.pool_id,
                command.current_ratio,
                result.old_target_ratio,
            )
        logger.info(
            "poke_fee: adjusted pool=%s old_fee=%s new_fee=%s old_target=%s new_target=%s",
            result.pool_id,
            result.old_fee,
            result.new_fee,
            result.old_target_ratio,
            result.new_target_ratio,
        )
        return result
