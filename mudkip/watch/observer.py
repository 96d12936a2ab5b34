"""watchdog-backed OS watches.

Folders are scheduled directly and non-recursively. A single file is watched
through its parent directory with events filtered down to that file, which
also catches editors that save by renaming a temporary file over it.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .coordinator import ChangeCallback, ChangeKind

_SIMPLE_KINDS = {
    EVENT_TYPE_CREATED: ChangeKind.CREATE,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFY,
    EVENT_TYPE_DELETED: ChangeKind.REMOVE,
}


def _event_path(raw: str | bytes) -> Path:
    return Path(os.fsdecode(raw))


def translate_event(event: FileSystemEvent, only: Path | None = None) -> list[tuple[ChangeKind, Path]]:
    """Map one watchdog event onto ``(ChangeKind, path)`` pairs.

    With ``only`` set, pairs not naming that path are dropped.
    """
    src_path = _event_path(event.src_path)
    if event.event_type == EVENT_TYPE_MOVED:
        dest_path = _event_path(getattr(event, "dest_path", "") or "")
        changes = [(ChangeKind.REMOVE, src_path), (ChangeKind.CREATE, dest_path)]
    else:
        changes = [(_SIMPLE_KINDS.get(event.event_type, ChangeKind.OTHER), src_path)]

    if only is None:
        return changes
    return [(kind, path) for kind, path in changes if path == only]


class _ForwardingHandler(FileSystemEventHandler):
    def __init__(self, callback: ChangeCallback, only: Path | None) -> None:
        super().__init__()
        self._callback = callback
        self._only = only

    def on_any_event(self, event: FileSystemEvent) -> None:
        for kind, path in translate_event(event, self._only):
            self._callback(kind, path)


class ObserverWatchHandle:
    """Owns one running observer; ``close`` stops and joins it."""

    def __init__(self, observer: Observer) -> None:
        self._observer = observer

    def close(self) -> None:
        self._observer.stop()
        if self._observer.is_alive() and threading.current_thread() is not self._observer:
            self._observer.join()


def attach_watchdog(path: Path, callback: ChangeCallback) -> ObserverWatchHandle:
    """Start a non-recursive watch on ``path`` delivering changes to ``callback``."""
    observer = Observer()
    if path.is_dir():
        observer.schedule(_ForwardingHandler(callback, None), str(path), recursive=False)
    else:
        observer.schedule(_ForwardingHandler(callback, path), str(path.parent), recursive=False)
    observer.daemon = True
    observer.start()
    return ObserverWatchHandle(observer)


__all__ = ["ObserverWatchHandle", "attach_watchdog", "translate_event"]
