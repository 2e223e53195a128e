from __future__ import annotations

import threading
from typing import Callable, TypeVar

from alphix.domain.entities.pool import Pool, ProtocolSettings
from alphix.domain.entities.rehypothecation import VaultState


TResult = TypeVar("TResult")


class InMemoryPoolStateRepository:
    """
    Process-local state store.

    Entities are frozen, so a transaction snapshot is a shallow copy of the
    three maps; an exception inside ``execute_in_transaction`` restores it.
    Nested transactions on the same thread join the outermost one; other
    threads wait for it to finish.
    """

    def __init__(self, *, protocol: ProtocolSettings):
        self._protocol = protocol
        self._pools: dict[str, Pool] = {}
        self._vaults: dict[str, VaultState] = {}
        self._depth = 0
        self._lock = threading.RLock()

    def execute_in_transaction(self, fn: Callable[["InMemoryPoolStateRepository"], TResult]) -> TResult:
        with self._lock:
            if self._depth > 0:
                return fn(self)

            snapshot = (self._protocol, dict(self._pools), dict(self._vaults))
            self._depth += 1
            try:
                return fn(self)
            except BaseException:
                self._protocol, self._pools, self._vaults = snapshot
                raise
            finally:
                self._depth -= 1

    def get_protocol_settings(self) -> ProtocolSettings:
        return self._protocol

    def save_protocol_settings(self, *, settings: ProtocolSettings) -> None:
        self._protocol = settings

    def get_pool(self, *, pool_id: str) -> Pool | None:
        return self._pools.get(pool_id)

    def save_pool(self, *, pool: Pool) -> None:
        self._pools[pool.pool_id] = pool

    def get_vault(self, *, pool_id: str) -> VaultState | None:
        return self._vaults.get(pool_id)

    def save_vault(self, *, vault: VaultState) -> None:
        self._vaults[vault.pool_id] = vault
