from __future__ import annotations

from typing import Protocol


class YieldSourcePort(Protocol):
    """External yield-bearing venue holding one asset on behalf of the vault."""

    @property
    def address(self) -> str:
        ...

    @property
    def asset(self) -> str:
        ...

    def deposit(self, amount: int) -> int:
        ...

    def preview_deposit(self, amount: int) -> int:
        """Assets the position would gain from depositing ``amount``, after entry costs."""
        ...

    def withdraw(self, amount: int) -> int:
        ...

    def total_assets(self) -> int:
        ...


class YieldSourceDirectoryPort(Protocol):
    def resolve(self, *, address: str) -> YieldSourcePort | None:
        ...
