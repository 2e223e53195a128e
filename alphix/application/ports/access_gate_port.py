from __future__ import annotations

from typing import Literal, Protocol


Capability = Literal["pool_owner", "yield_manager", "fee_poker"]


class AccessGatePort(Protocol):
    def require(self, *, capability: Capability, caller: str) -> None:
        ...
