from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from alphix.domain.entities.pool import Pool, ProtocolSettings
from alphix.domain.entities.rehypothecation import VaultState


TStateResult = TypeVar("TStateResult")


class PoolStatePort(Protocol):
    def execute_in_transaction(self, fn: Callable[[PoolStatePort], TStateResult]) -> TStateResult:
        ...

    def get_protocol_settings(self) -> ProtocolSettings:
        ...

    def save_protocol_settings(self, *, settings: ProtocolSettings) -> None:
        ...

    def get_pool(self, *, pool_id: str) -> Pool | None:
        ...

    def save_pool(self, *, pool: Pool) -> None:
        ...

    def get_vault(self, *, pool_id: str) -> VaultState | None:
        ...

    def save_vault(self, *, vault: VaultState) -> None:
        ...
