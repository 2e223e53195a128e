from __future__ import annotations

import hashlib
from dataclasses import replace

from alphix.domain.entities.pool import LifecycleState, Pool, PoolKey, PoolStatus, ProtocolSettings
from alphix.domain.exceptions import (
    PoolNotConfiguredError,
    PoolPausedError,
    ProtocolPausedError,
)


def compute_pool_id(key: PoolKey) -> str:
    payload = "|".join(
        [
            key.currency0.lower(),
            key.currency1.lower(),
            str(key.fee),
            str(key.tick_spacing),
            key.hooks.lower(),
        ]
    )
    return "0x" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def resolve_state(pool: Pool | None, protocol: ProtocolSettings) -> LifecycleState:
    if protocol.paused:
        return LifecycleState.PAUSED_OVERRIDE
    if pool is None or pool.status is PoolStatus.UNCONFIGURED:
        return LifecycleState.UNCONFIGURED
    if pool.status is PoolStatus.ACTIVE:
        return LifecycleState.CONFIGURED_ACTIVE
    return LifecycleState.CONFIGURED_INACTIVE


def require_not_paused(protocol: ProtocolSettings) -> None:
    if protocol.paused:
        raise ProtocolPausedError("Protocol is paused.")


def require_configured(pool: Pool | None) -> Pool:
    if pool is None or pool.status is PoolStatus.UNCONFIGURED:
        raise PoolNotConfiguredError("Pool is not configured.")
    return pool


def require_active(pool: Pool | None, protocol: ProtocolSettings) -> Pool:
    state = resolve_state(pool, protocol)
    if state is LifecycleState.PAUSED_OVERRIDE:
        raise ProtocolPausedError("Protocol is paused.")
    if state is LifecycleState.UNCONFIGURED:
        raise PoolNotConfiguredError("Pool is not configured.")
    if state is LifecycleState.CONFIGURED_INACTIVE:
        raise PoolPausedError("Pool is inactive.")
    return pool


def transition(pool: Pool | None, target: PoolStatus) -> Pool:
    """Owner-driven status change between the configured states."""
    configured = require_configured(pool)
    if target is PoolStatus.UNCONFIGURED:
        raise ValueError("A configured pool cannot return to unconfigured.")
    return replace(configured, status=target)
