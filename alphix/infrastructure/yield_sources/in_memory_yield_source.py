from __future__ import annotations

import logging

from alphix.domain.services.ratio_math import BPS_DENOMINATOR, mul_div


logger = logging.getLogger(__name__)


class InMemoryYieldSource:
    """Balance-tracking yield source; yield and losses are injected by the caller."""

    def __init__(self, *, address: str, asset: str, initial_assets: int = 0):
        self._address = address
        self._asset = asset
        self._assets = initial_assets

    @property
    def address(self) -> str:
        return self._address

    @property
    def asset(self) -> str:
        return self._asset

    def deposit(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("deposit amount must be non-negative.")
        self._assets += amount
        return amount

    def preview_deposit(self, amount: int) -> int:
        return max(amount, 0)

    def withdraw(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("withdraw amount must be non-negative.")
        if amount > self._assets:
            raise ValueError(f"withdraw {amount} exceeds held assets {self._assets}.")
        self._assets -= amount
        return amount

    def total_assets(self) -> int:
        return self._assets

    def simulate_yield(self, amount: int) -> None:
        self._assets += amount
        logger.debug("in_memory_yield_source: yield address=%s amount=%s", self._address, amount)

    def simulate_loss_bps(self, loss_bps: int) -> int:
        if loss_bps < 0 or loss_bps > BPS_DENOMINATOR:
            raise ValueError("loss_bps must be within [0, 10000].")
        lost = mul_div(self._assets, loss_bps, BPS_DENOMINATOR)
        self._assets -= lost
        logger.debug("in_memory_yield_source: loss address=%s lost=%s", self._address, lost)
        return lost
