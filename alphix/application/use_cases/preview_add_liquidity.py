from __future__ import annotations

from alphix.application.dto.rehypothecation import LiquidityAmountsOutput
from alphix.application.ports.host_pool_port import HostPoolPort
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort

from .vault_common import accrue_vault, load_vault, quote_add_amounts


class PreviewAddLiquidityUseCase:
    """Amounts ``add`` would pull for ``shares``, rounded up."""

    def __init__(
        self,
        *,
        state_port: PoolStatePort,
        host_port: HostPoolPort,
        yield_sources: YieldSourceDirectoryPort,
    ):
        self._state_port = state_port
        self._host_port = host_port
        self._yield_sources = yield_sources

    def execute(self, *, shares: int) -> LiquidityAmountsOutput:
        if shares <= 0:
            return LiquidityAmountsOutput(shares=max(shares, 0), amount0=0, amount1=0)
        _, pool, vault = load_vault(self._state_port)
        accrued, accrual0, accrual1 = accrue_vault(vault, self._yield_sources)
        amount0, amount1 = quote_add_amounts(
            shares=shares,
            pool=pool,
            vault=accrued,
            accrual0=accrual0,
            accrual1=accrual1,
            host_port=self._host_port,
        )
        return LiquidityAmountsOutput(shares=shares, amount0=amount0, amount1=amount1)
