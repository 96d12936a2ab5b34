"""Events delivered to the GUI shell and the channel that carries them.

Watch callbacks run on observer threads. They never talk to the shell
directly; they publish here and a single pump thread delivers in order.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Empty, Queue

FILE_CHANGED = "file:changed"
FOLDER_CHANGED = "folder:changed"
FILE_OPENED_EXTERNAL = "file:opened-external"
FILE_OPEN_ON_LAUNCH = "file:open-on-launch"
APP_STARTUP_OPTIONS = "app:startup-options"


@dataclass(frozen=True)
class ShellEvent:
    name: str
    payload: object


class EventChannel:
    """Thread-safe FIFO of shell events.

    Closing the channel drops later publishes and wakes blocked readers.
    """

    _CLOSED = ShellEvent(name="", payload=None)

    def __init__(self) -> None:
        self._queue: Queue[ShellEvent] = Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def publish(self, name: str, payload: object) -> bool:
        """Queue one event; returns ``False`` when the channel is closed."""
        with self._lock:
            if self._closed:
                return False
            self._queue.put(ShellEvent(name=name, payload=payload))
        return True

    def get(self, timeout: float | None = None) -> ShellEvent | None:
        """Block for the next event; ``None`` on timeout or after close."""
        try:
            event = self._queue.get(timeout=timeout)
        except Empty:
            return None
        if event is self._CLOSED:
            # Leave the sentinel for any other blocked reader.
            self._queue.put(self._CLOSED)
            return None
        return event

    def drain(self) -> list[ShellEvent]:
        """Return all queued events without blocking."""
        out: list[ShellEvent] = []
        while True:
            try:
                event = self._queue.get_nowait()
            except Empty:
                break
            if event is self._CLOSED:
                self._queue.put(self._CLOSED)
                break
            out.append(event)
        return out

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(self._CLOSED)


__all__ = [
    "APP_STARTUP_OPTIONS",
    "FILE_CHANGED",
    "FILE_OPENED_EXTERNAL",
    "FILE_OPEN_ON_LAUNCH",
    "FOLDER_CHANGED",
    "EventChannel",
    "ShellEvent",
]
