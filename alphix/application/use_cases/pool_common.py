from __future__ import annotations

from alphix.application.dto.pool import PoolOutput
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.domain.entities.pool import Pool, ProtocolSettings
from alphix.domain.exceptions import PoolNotConfiguredError
from alphix.domain.services.pool_lifecycle import require_configured, resolve_state


def bound_pool_id(state_port: PoolStatePort) -> str:
    pool_id = state_port.get_protocol_settings().pool_id
    if pool_id is None:
        raise PoolNotConfiguredError("No pool is bound to this hook.")
    return pool_id


def load_bound_pool(state_port: PoolStatePort) -> tuple[ProtocolSettings, Pool]:
    protocol = state_port.get_protocol_settings()
    if protocol.pool_id is None:
        raise PoolNotConfiguredError("No pool is bound to this hook.")
    pool = require_configured(state_port.get_pool(pool_id=protocol.pool_id))
    return protocol, pool


def build_pool_output(pool: Pool, protocol: ProtocolSettings) -> PoolOutput:
    return PoolOutput(
        pool_id=pool.pool_id,
        pool_type=pool.config.pool_type,
        status=pool.status.value,
        lifecycle_state=resolve_state(pool, protocol).value,
        current_fee=pool.fee_state.current_fee,
        current_target_ratio=pool.fee_state.current_target_ratio,
        last_adjustment_timestamp=pool.fee_state.last_adjustment_timestamp,
    )
