from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException

from alphix.application.ports.host_pool_port import HostPoolPort, TokenSettlementPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.use_cases.add_rehypothecated_liquidity import AddReHypothecatedLiquidityUseCase
from alphix.application.use_cases.collect_accumulated_tax import CollectAccumulatedTaxUseCase
from alphix.application.use_cases.get_pool import GetPoolUseCase
from alphix.application.use_cases.get_pool_fee import GetPoolFeeUseCase
from alphix.application.use_cases.get_vault import GetVaultUseCase
from alphix.application.use_cases.hook_callbacks import HookCallbacksUseCase
from alphix.application.use_cases.initialize_pool import InitializePoolUseCase
from alphix.application.use_cases.poke_fee import PokeFeeUseCase
from alphix.application.use_cases.preview_add_liquidity import PreviewAddLiquidityUseCase
from alphix.application.use_cases.preview_remove_liquidity import PreviewRemoveLiquidityUseCase
from alphix.application.use_cases.reentrancy import ReentrancyGuard
from alphix.application.use_cases.remove_rehypothecated_liquidity import (
    RemoveReHypothecatedLiquidityUseCase,
)
from alphix.application.use_cases.set_global_max_adj_rate import SetGlobalMaxAdjRateUseCase
from alphix.application.use_cases.set_pool_params import SetPoolParamsUseCase
from alphix.application.use_cases.set_pool_status import SetPoolStatusUseCase
from alphix.application.use_cases.set_protocol_pause import SetProtocolPauseUseCase
from alphix.application.use_cases.set_tick_range import SetTickRangeUseCase
from alphix.application.use_cases.set_yield_source import SetYieldSourceUseCase
from alphix.application.use_cases.set_yield_tax import SetYieldTaxUseCase
from alphix.application.use_cases.set_yield_treasury import SetYieldTreasuryUseCase
from alphix.domain.entities.pool import ProtocolSettings
from alphix.domain.services.target_ratio_smoothing import get_smoothing_strategy
from alphix.infrastructure.clock.system_clock import SystemClock
from alphix.infrastructure.db.engine import get_engine, init_db
from alphix.infrastructure.db.repositories.pool_state_repository import SqlPoolStateRepository
from alphix.infrastructure.events.logging_event_sink import LoggingEventSink
from alphix.infrastructure.memory.in_memory_pool_state_repository import InMemoryPoolStateRepository
from alphix.infrastructure.security.access_gate import RoleAccessGate
from alphix.infrastructure.yield_sources.directory import StaticYieldSourceDirectory
from alphix.infrastructure.yield_sources.in_memory_yield_source import InMemoryYieldSource
from alphix.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_state_port() -> PoolStatePort:
    settings = get_settings()
    if not settings.database_dsn:
        return InMemoryPoolStateRepository(
            protocol=ProtocolSettings(
                global_max_adj_rate=settings.global_max_adj_rate,
                paused=False,
                pool_id=None,
            )
        )
    engine = get_engine(settings.database_dsn)
    init_db(engine)
    return SqlPoolStateRepository(
        engine,
        hook_address=settings.hook_address,
        default_global_max_adj_rate=settings.global_max_adj_rate,
    )


@lru_cache(maxsize=1)
def _get_access_gate() -> RoleAccessGate:
    return RoleAccessGate(get_settings().role_grants)


@lru_cache(maxsize=1)
def _get_yield_sources() -> StaticYieldSourceDirectory:
    return StaticYieldSourceDirectory(
        InMemoryYieldSource(address=address, asset=asset)
        for address, asset in get_settings().yield_sources.items()
    )


@lru_cache(maxsize=1)
def _get_guard() -> ReentrancyGuard:
    return ReentrancyGuard()


@lru_cache(maxsize=1)
def _get_event_sink() -> LoggingEventSink:
    return LoggingEventSink()


@lru_cache(maxsize=1)
def _get_clock() -> SystemClock:
    return SystemClock()


def get_host_pool_port() -> HostPoolPort:
    raise HTTPException(status_code=503, detail="No host runtime is bound.")


def get_token_settlement() -> TokenSettlementPort:
    raise HTTPException(status_code=503, detail="No token settlement is bound.")


def get_get_pool_use_case() -> GetPoolUseCase:
    return GetPoolUseCase(state_port=_get_state_port())


def get_initialize_pool_use_case(
    host_port: HostPoolPort = Depends(get_host_pool_port),
) -> InitializePoolUseCase:
    settings = get_settings()
    return InitializePoolUseCase(
        state_port=_get_state_port(),
        host_port=host_port,
        access_gate=_get_access_gate(),
        clock=_get_clock(),
        event_sink=_get_event_sink(),
        hook_address=settings.hook_address,
        logic_address=settings.logic_address,
    )


def get_set_pool_status_use_case() -> SetPoolStatusUseCase:
    return SetPoolStatusUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_set_protocol_pause_use_case() -> SetProtocolPauseUseCase:
    return SetProtocolPauseUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_get_pool_fee_use_case() -> GetPoolFeeUseCase:
    return GetPoolFeeUseCase(state_port=_get_state_port())


def get_poke_fee_use_case() -> PokeFeeUseCase:
    return PokeFeeUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        clock=_get_clock(),
        event_sink=_get_event_sink(),
        smoothing=get_smoothing_strategy(get_settings().target_ratio_smoothing),
        guard=_get_guard(),
    )


def get_set_pool_params_use_case() -> SetPoolParamsUseCase:
    return SetPoolParamsUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_set_global_max_adj_rate_use_case() -> SetGlobalMaxAdjRateUseCase:
    return SetGlobalMaxAdjRateUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_get_vault_use_case() -> GetVaultUseCase:
    return GetVaultUseCase(state_port=_get_state_port(), yield_sources=_get_yield_sources())


def get_preview_add_liquidity_use_case(
    host_port: HostPoolPort = Depends(get_host_pool_port),
) -> PreviewAddLiquidityUseCase:
    return PreviewAddLiquidityUseCase(
        state_port=_get_state_port(),
        host_port=host_port,
        yield_sources=_get_yield_sources(),
    )


def get_preview_remove_liquidity_use_case() -> PreviewRemoveLiquidityUseCase:
    return PreviewRemoveLiquidityUseCase(state_port=_get_state_port(), yield_sources=_get_yield_sources())


def get_add_liquidity_use_case(
    host_port: HostPoolPort = Depends(get_host_pool_port),
    settlement: TokenSettlementPort = Depends(get_token_settlement),
) -> AddReHypothecatedLiquidityUseCase:
    return AddReHypothecatedLiquidityUseCase(
        state_port=_get_state_port(),
        host_port=host_port,
        settlement=settlement,
        yield_sources=_get_yield_sources(),
        event_sink=_get_event_sink(),
        guard=_get_guard(),
    )


def get_remove_liquidity_use_case(
    settlement: TokenSettlementPort = Depends(get_token_settlement),
) -> RemoveReHypothecatedLiquidityUseCase:
    return RemoveReHypothecatedLiquidityUseCase(
        state_port=_get_state_port(),
        settlement=settlement,
        yield_sources=_get_yield_sources(),
        event_sink=_get_event_sink(),
        guard=_get_guard(),
    )


def get_collect_tax_use_case(
    settlement: TokenSettlementPort = Depends(get_token_settlement),
) -> CollectAccumulatedTaxUseCase:
    return CollectAccumulatedTaxUseCase(
        state_port=_get_state_port(),
        settlement=settlement,
        yield_sources=_get_yield_sources(),
        event_sink=_get_event_sink(),
        guard=_get_guard(),
    )


def get_set_yield_source_use_case() -> SetYieldSourceUseCase:
    return SetYieldSourceUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        yield_sources=_get_yield_sources(),
        event_sink=_get_event_sink(),
        guard=_get_guard(),
        slippage_tolerance_bps=get_settings().migration_slippage_tolerance_bps,
    )


def get_set_tick_range_use_case() -> SetTickRangeUseCase:
    return SetTickRangeUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_set_yield_tax_use_case() -> SetYieldTaxUseCase:
    return SetYieldTaxUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        yield_sources=_get_yield_sources(),
        event_sink=_get_event_sink(),
    )


def get_set_yield_treasury_use_case() -> SetYieldTreasuryUseCase:
    return SetYieldTreasuryUseCase(
        state_port=_get_state_port(),
        access_gate=_get_access_gate(),
        event_sink=_get_event_sink(),
    )


def get_hook_callbacks_use_case(
    host_port: HostPoolPort = Depends(get_host_pool_port),
) -> HookCallbacksUseCase:
    """In-process entry point for the host runtime bound through ``get_host_pool_port``."""
    settings = get_settings()
    return HookCallbacksUseCase(
        state_port=_get_state_port(),
        host_port=host_port,
        yield_sources=_get_yield_sources(),
        guard=_get_guard(),
        pool_manager_address=settings.pool_manager_address,
        hook_address=settings.hook_address,
    )
