from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any


logger = logging.getLogger(__name__)


class LoggingEventSink:
    def emit(self, event: Any) -> None:
        payload = asdict(event) if is_dataclass(event) else {"value": event}
        fields = " ".join(f"{name}={value}" for name, value in payload.items())
        logger.info("alphix_event: %s %s", type(event).__name__, fields)
