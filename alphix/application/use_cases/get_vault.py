from __future__ import annotations

from alphix.application.dto.rehypothecation import VaultOutput
from alphix.application.ports.pool_state_port import PoolStatePort
from alphix.application.ports.yield_source_port import YieldSourceDirectoryPort

from .vault_common import build_vault_output, load_vault


class GetVaultUseCase:
    def __init__(self, *, state_port: PoolStatePort, yield_sources: YieldSourceDirectoryPort):
        self._state_port = state_port
        self._yield_sources = yield_sources

    def execute(self, *, holder: str | None = None) -> VaultOutput:
        _, _, vault = load_vault(self._state_port)
        return build_vault_output(vault, self._yield_sources, holder=holder)
