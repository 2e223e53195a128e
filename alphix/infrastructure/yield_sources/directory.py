from __future__ import annotations

from typing import Iterable

from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort, YieldSourcePort


class StaticYieldSourceDirectory(YieldSourceDirectoryPort):
    def __init__(self, adapters: Iterable[YieldSourcePort] = ()):
        self._adapters: dict[str, YieldSourcePort] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: YieldSourcePort) -> None:
        self._adapters[adapter.address.lower()] = adapter

    def resolve(self, *, address: str) -> YieldSourcePort | None:
        if not address:
            return None
        return self._adapters.get(address.lower())
