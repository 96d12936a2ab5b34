"""Single-active-watch state machine shared by the file and folder watchers.

A coordinator is either idle (no handle, no path) or watching exactly one
canonical path. The handle and the path are always set and cleared together
under the coordinator lock. Observer callbacks never take that lock: each
callback is bound to the path it was attached for and only publishes rebuilt
payloads to the event channel.
"""

from __future__ import annotations

import enum
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..events import EventChannel
from ..log import get_logger
from ..payloads import PayloadError
from ..targets import display_path

logger = get_logger("watch")


class WatchError(Exception):
    """Starting a watch failed; the message is ready for display."""


class ChangeKind(enum.Enum):
    CREATE = "create"
    MODIFY = "modify"
    REMOVE = "remove"
    OTHER = "other"


class WatchHandle(Protocol):
    def close(self) -> None: ...


ChangeCallback = Callable[[ChangeKind, Path], None]
AttachWatch = Callable[[Path, ChangeCallback], WatchHandle]


class WatchCoordinator:
    """Owns at most one OS watch and republishes payloads on change.

    Subclasses define what a valid target is, which change kinds matter, how
    the payload is rebuilt, and the event name it is published under.
    """

    target_label = "path"
    event_name = ""
    reacts_to: frozenset[ChangeKind] = frozenset()

    def __init__(self, events: EventChannel, attach_watch: AttachWatch | None = None) -> None:
        if attach_watch is None:
            from .observer import attach_watchdog

            attach_watch = attach_watchdog
        self._events = events
        self._attach_watch = attach_watch
        self._lock = threading.Lock()
        self._handle: WatchHandle | None = None
        self._watched_path: Path | None = None

    def resolve_target(self, path: Path | str) -> Path:
        """Return the canonical path to watch or raise ``WatchError``."""
        raise NotImplementedError

    def build_payload(self, path: Path) -> object:
        """Rebuild the payload for ``path``; may raise ``PayloadError``."""
        raise NotImplementedError

    @property
    def watched_path(self) -> Path | None:
        with self._lock:
            return self._watched_path

    @property
    def is_watching(self) -> bool:
        with self._lock:
            return self._handle is not None

    def start(self, path: Path | str) -> None:
        """Watch ``path``, replacing any other watch.

        Re-starting on the path already watched is a no-op. When attaching
        fails the coordinator is left idle.
        """
        canonical_path = self.resolve_target(path)
        with self._lock:
            if self._handle is not None and self._watched_path == canonical_path:
                return
            self._teardown_locked()
            try:
                handle = self._attach_watch(canonical_path, self._change_callback(canonical_path))
            except Exception as exc:
                # Observer backends raise backend-specific error types.
                raise WatchError(
                    f"Failed to watch {self.target_label} '{display_path(canonical_path)}': {exc}"
                ) from exc
            self._handle = handle
            self._watched_path = canonical_path
        logger.debug("Watching %s %s", self.target_label, canonical_path)

    def stop(self) -> None:
        """Tear down the active watch, if any."""
        with self._lock:
            self._teardown_locked()

    def _teardown_locked(self) -> None:
        handle = self._handle
        previous_path = self._watched_path
        self._handle = None
        self._watched_path = None
        if handle is None:
            return
        try:
            handle.close()
        except Exception:
            logger.warning("Failed to close watch on %s", previous_path, exc_info=True)
        logger.debug("Stopped watching %s %s", self.target_label, previous_path)

    def _change_callback(self, watched_path: Path) -> ChangeCallback:
        def on_change(kind: ChangeKind, _event_path: Path) -> None:
            if kind not in self.reacts_to:
                return
            self.publish_rebuild(watched_path)

        return on_change

    def publish_rebuild(self, watched_path: Path) -> bool:
        """Rebuild and publish the payload for ``watched_path``.

        Failures (typically a file deleted mid-edit) publish nothing and keep
        the watch alive so a later event can recover.
        """
        try:
            payload = self.build_payload(watched_path)
        except PayloadError as exc:
            logger.debug("Skipping %s refresh: %s", self.target_label, exc)
            return False
        return self._events.publish(self.event_name, payload)


__all__ = [
    "AttachWatch",
    "ChangeCallback",
    "ChangeKind",
    "WatchCoordinator",
    "WatchError",
    "WatchHandle",
]
