from __future__ import annotations

from alphix.application.dto.fee import FeeOutput
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.services.dynamic_fee import next_allowed_time

from .pool_common import load_bound_pool


class GetPoolFeeUseCase:
    def __init__(self, *, state_port: PoolStatePort):
        self._state_port = state_port

    def execute(self) -> FeeOutput:
        protocol, pool = load_bound_pool(self._state_port)
        return FeeOutput(
            pool_id=pool.pool_id,
            current_fee=pool.fee_state.current_fee,
            current_target_ratio=pool.fee_state.current_target_ratio,
            last_adjustment_timestamp=pool.fee_state.last_adjustment_timestamp,
            next_adjustment_time=next_allowed_time(pool.fee_state, pool.params),
            global_max_adj_rate=protocol.global_max_adj_rate,
            params=pool.params,
        )
