from __future__ import annotations

from alphix.application.dto.rehypothecation import LiquidityAmountsOutput
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort
from alphix.domain.services.share_accounting import preview_remove_amounts

from .vault_common import accrue_vault, load_vault


class PreviewRemoveLiquidityUseCase:
    """Amounts ``remove`` would pay out for ``shares``, rounded down."""

    def __init__(self, *, state_port: PoolStatePort, yield_sources: YieldSourceDirectoryPort):
        self._state_port = state_port
        self._yield_sources = yield_sources

    def execute(self, *, shares: int) -> LiquidityAmountsOutput:
        if shares <= 0:
            return LiquidityAmountsOutput(shares=max(shares, 0), amount0=0, amount1=0)
        _, _, vault = load_vault(self._state_port)
        accrued, accrual0, accrual1 = accrue_vault(vault, self._yield_sources)
        amount0, amount1 = preview_remove_amounts(
            shares=shares,
            total_supply=accrued.total_supply,
            net_assets0=accrual0.net_assets,
            net_assets1=accrual1.net_assets,
        )
        return LiquidityAmountsOutput(shares=shares, amount0=amount0, amount1=amount1)
