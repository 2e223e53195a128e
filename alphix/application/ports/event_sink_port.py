from __future__ import annotations

from typing import Any, Protocol


class EventSinkPort(Protocol):
    def emit(self, event: Any) -> None:
        ...
