from __future__ import annotations

from typing import Iterable, Mapping

from alphix.application.ports.access_gate_port import AccessGatePort, Capability
from alphix.domain.exceptions import AccessDeniedError


class RoleAccessGate(AccessGatePort):
    """Capability grants loaded from configuration, e.g. ``{"pool_owner": ["0xabc"]}``."""

    def __init__(self, grants: Mapping[str, Iterable[str]]):
        self._grants = {
            capability: {address.lower() for address in addresses}
            for capability, addresses in grants.items()
        }

    def require(self, *, capability: Capability, caller: str) -> None:
        if not caller or caller.lower() not in self._grants.get(capability, set()):
            raise AccessDeniedError(capability, caller)
