from __future__ import annotations

from alphix.application.dto.pool import PoolOutput
from alphix.application.ports.pool_state_port import PoolStatePort

from .pool_common import build_pool_output, load_bound_pool


class GetPoolUseCase:
    def __init__(self, *, state_port: PoolStatePort):
        self._state_port = state_port

    def execute(self) -> PoolOutput:
        protocol, pool = load_bound_pool(self._state_port)
        return build_pool_output(pool, protocol)
