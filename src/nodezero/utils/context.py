# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/utils/context.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

from nodezero.agent.errors import RequestCancelledError

log = logging.getLogger("nodezero")


class Context:
    """
    Cancellation handle threaded through every REST call.

    cancel() marks the context done and runs registered callbacks once.
    on_cancel() returns a function that unregisters the callback again.
    """

    def __init__(self, *, deadline: Optional[float] = None):
        self.deadline = deadline
        self._cancelled = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @classmethod
    def background(cls) -> "Context":
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "Context":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb()
            except Exception:
                log.exception("cancel callback %r failed", cb)

    def on_cancel(self, cb: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(cb)
                return lambda: self._unregister(cb)
        cb()
        return lambda: None

    def _unregister(self, cb: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(cb)
            except ValueError:
                pass

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def done(self) -> bool:
        return self.cancelled or self.remaining() == 0.0

    def raise_if_done(self) -> None:
        if self.cancelled:
            raise RequestCancelledError("context cancelled")
        if self.remaining() == 0.0:
            raise RequestCancelledError("context deadline exceeded")

    def bound_timeout(self, timeout: float) -> float:
        """Shrink an HTTP timeout so it never outlives the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)
