"""FIFO hand-off of open targets for the window owned by this process."""

from __future__ import annotations

import threading
from collections import deque

from .targets import OpenTargetPayload


class PendingOpenTargets:
    """Targets waiting for the shell to consume them, oldest first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._queue: deque[OpenTargetPayload] = deque()

    def push(self, target: OpenTargetPayload) -> None:
        with self._lock:
            self._queue.append(target)

    def pop(self) -> OpenTargetPayload | None:
        """Remove and return the oldest pending target, if any."""
        with self._lock:
            if not self._queue:
                return None
            return self._queue.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)


__all__ = ["PendingOpenTargets"]
