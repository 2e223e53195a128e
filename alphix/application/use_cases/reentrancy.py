from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from alphix.domain.exceptions import ReentrancyError


class ReentrancyGuard:
    """
    One lock per pool, shared by every guarded entry point of a deployment.

    Entries are tracked per thread: a guarded call that re-enters on the same
    call stack fails, while concurrent requests on other threads are left to
    the state store's transaction serialization.
    """

    def __init__(self):
        self._local = threading.local()

    def _entered(self) -> set[str]:
        entered = getattr(self._local, "entered", None)
        if entered is None:
            entered = self._local.entered = set()
        return entered

    @contextmanager
    def enter(self, key: str) -> Iterator[None]:
        entered = self._entered()
        if key in entered:
            raise ReentrancyError(f"Reentrant call for pool {key}.")
        entered.add(key)
        try:
            yield
        finally:
            entered.discard(key)
